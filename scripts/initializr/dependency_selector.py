"""Dependency catalog, selection state and the pick list built from them."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

LAST_USED_FILENAME = ".last_used_dependencies"

ITEM_LAST_USED = "lastUsed"
ITEM_SELECTION = "selection"
ITEM_SEPARATOR = "separator"
ITEM_DEPENDENCY = "dependency"


@dataclass(frozen=True)
class DisplayItem:
    """One row of the dependency pick list.

    ``id`` is a catalog id for dependency rows and a comma-joined id list for
    the selection summary and the last used rows.
    """
    item_type: str
    id: Optional[str]
    label: Optional[str]
    description: str = ""

    @property
    def ids(self) -> list:
        return [i for i in (self.id or "").split(",") if i]


def _separator(name: Optional[str]) -> DisplayItem:
    return DisplayItem(item_type=ITEM_SEPARATOR, id=name, label=name)


class LastUsedStore:
    """Reads and writes the last used id list under a storage directory."""

    def __init__(self, root: Path):
        self.path = Path(root) / LAST_USED_FILENAME

    def read(self) -> Optional[str]:
        if not self.path.exists():
            return None
        return self.path.read_text(encoding="utf-8").strip() or None

    def write(self, id_list: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(id_list, encoding="utf-8")
        logger.debug("Stored last used dependencies %r in %s", id_list, self.path)


class DependencySelector:
    """Tracks which catalog entries are selected and lists them for display.

    Args:
        store: Where the last used id list lives. ``None`` disables it.
        selected_ids: Ids selected before the first pick.
    """

    def __init__(self, store: Optional[LastUsedStore] = None, selected_ids: Optional[list] = None):
        self.store = store
        self.dependencies: list = []
        self.by_id: dict = {}
        self.selected_ids: list = []
        self.last_selected: Optional[str] = None
        for dep_id in selected_ids or []:
            if dep_id not in self.selected_ids:
                self.selected_ids.append(dep_id)

    def initialize(self, catalog: list) -> None:
        """Load the catalog and the last used id list.

        ``None`` entries and repeated ids are skipped; the first entry for an
        id wins.
        """
        self.dependencies = []
        self.by_id = {}
        for dep in catalog:
            if dep is None or dep.id in self.by_id:
                continue
            self.dependencies.append(dep)
            self.by_id[dep.id] = dep
        self.last_selected = self.store.read() if self.store else None

    def selected(self) -> list:
        return [self.by_id[i] for i in self.selected_ids if i in self.by_id]

    def unselected(self) -> list:
        return [dep for dep in self.dependencies if dep.id not in self.selected_ids]

    def toggle(self, dep_id: str) -> None:
        if dep_id in self.selected_ids:
            self.selected_ids = [i for i in self.selected_ids if i != dep_id]
        else:
            self.selected_ids.append(dep_id)

    def remember(self, item: DisplayItem) -> None:
        """Persist the id list of a confirmed item as the last used selection."""
        self.last_selected = item.id
        if self.store is not None:
            self.store.write(item.id or "")

    def _last_used_item(self) -> Optional[DisplayItem]:
        ids = [i for i in (self.last_selected or "").split(",") if i in self.by_id]
        names = [self.by_id[i].name for i in ids if self.by_id[i].name]
        if not names:
            return None
        return DisplayItem(
            item_type=ITEM_LAST_USED,
            id=",".join(ids),
            label="Last used",
            description=", ".join(names),
        )

    def list_display_items(self, has_last_selected: bool = False) -> list:
        """Build the pick list: last used, summary, selected, then the rest.

        Separators between unselected groups start at the second group; the
        first group is listed without a header.
        """
        items = []
        if not self.selected_ids and has_last_selected and self.last_selected:
            last_used = self._last_used_item()
            if last_used is not None:
                items.append(last_used)

        count = len(self.selected_ids)
        items.append(DisplayItem(
            item_type=ITEM_SELECTION,
            id=",".join(self.selected_ids),
            label=f"Selected {count} dependenc{'y' if count == 1 else 'ies'}",
        ))

        selected = self.selected()
        if selected:
            items.append(_separator("Selected"))
            for dep in selected:
                items.append(DisplayItem(
                    item_type=ITEM_DEPENDENCY,
                    id=dep.id,
                    label=f"(selected) {dep.name}",
                    description=dep.group or "",
                ))

        group = None
        for index, dep in enumerate(self.unselected()):
            if index > 0 and dep.group != group:
                items.append(_separator(dep.group))
            group = dep.group
            items.append(DisplayItem(
                item_type=ITEM_DEPENDENCY,
                id=dep.id,
                label=dep.name,
                description=dep.group or "",
            ))
        return items
