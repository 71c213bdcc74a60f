"""Structural insertion of starters and BOMs into an existing pom.xml.

The POM is never re-serialized. Elements are located with the offset
preserving lexer and new ``<dependency>`` blocks are inserted as text just
before the relevant closing tag, so comments, formatting and everything
else in the file stay byte-identical.
"""

import logging
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .errors import UserError
from .pom_models import Artifact, Bom
from .xml_lexer import XmlElement, find_elements

logger = logging.getLogger(__name__)

DEFAULT_SCOPE = "compile"
PLATFORM_EOL = "\r\n" if sys.platform == "win32" else "\n"


class PomNode:
    """Renders a list of fragments to indented text lines."""

    @staticmethod
    def wrap_with_parent(lines: list, indent: str, parent: str) -> list:
        return [f"<{parent}>", *[f"{indent}{line}" for line in lines], f"</{parent}>"]

    def get_text_lines(self, indent: str) -> list:
        raise NotImplementedError


class DependencyNodes(PomNode):
    """``<dependency>`` blocks, optionally wrapped in a new ``<dependencies>``."""

    def __init__(self, artifacts: list, init_parent: bool = False):
        self.artifacts = artifacts
        self.init_parent = init_parent

    def get_text_lines(self, indent: str) -> list:
        lines = []
        for artifact in self.artifacts:
            lines.extend(self._artifact_lines(artifact, indent))
        if self.init_parent:
            return self.wrap_with_parent(lines, indent, "dependencies")
        return lines

    def _artifact_lines(self, artifact: Artifact, indent: str) -> list:
        lines = [
            f"<groupId>{artifact.group_id}</groupId>",
            f"<artifactId>{artifact.artifact_id}</artifactId>",
        ]
        if artifact.version:
            lines.append(f"<version>{artifact.version}</version>")
        if artifact.scope and artifact.scope != DEFAULT_SCOPE:
            lines.append(f"<scope>{artifact.scope}</scope>")
        return self.wrap_with_parent(lines, indent, "dependency")


class BomNodes(PomNode):
    """BOM import blocks, wrapped in each of ``parents`` from the inside out."""

    def __init__(self, boms: list, parents: Optional[list] = None):
        self.boms = boms
        self.parents = parents or []

    def get_text_lines(self, indent: str) -> list:
        lines = []
        for bom in self.boms:
            lines.extend(self._bom_lines(bom, indent))
        for parent in self.parents:
            lines = self.wrap_with_parent(lines, indent, parent)
        return lines

    def _bom_lines(self, bom: Bom, indent: str) -> list:
        lines = [
            f"<groupId>{bom.group_id}</groupId>",
            f"<artifactId>{bom.artifact_id}</artifactId>",
            f"<version>{bom.version}</version>",
            "<type>pom</type>",
            "<scope>import</scope>",
        ]
        return self.wrap_with_parent(lines, indent, "dependency")


class NodeGroup(PomNode):
    """Several blocks inserted into the same element, in order."""

    def __init__(self, nodes: list):
        self.nodes = nodes

    def get_text_lines(self, indent: str) -> list:
        lines = []
        for node in self.nodes:
            lines.extend(node.get_text_lines(indent))
        return lines


@dataclass(frozen=True)
class TextEdit:
    """Replace ``text[start:end]`` with ``new_text``; an insert when start == end."""
    start: int
    end: int
    new_text: str


@dataclass
class PomEdit:
    """All text edits of one patch operation against one document snapshot."""
    edits: list = field(default_factory=list)

    def apply(self, text: str) -> str:
        """Apply every edit at once and return the new text.

        Edits at the same offset keep the order they were added in.

        Raises:
            ValueError: If two edits overlap.
        """
        parts = []
        pos = 0
        for edit in sorted(self.edits, key=lambda e: e.start):
            if edit.start < pos:
                raise ValueError(f"Overlapping edits at offset {edit.start}")
            parts.append(text[pos:edit.start])
            parts.append(edit.new_text)
            pos = edit.end
        parts.append(text[pos:])
        return "".join(parts)


@dataclass
class BuildDescriptorDocument:
    """A build file snapshot that changes only through ``apply_edit``."""
    path: Path
    text: str

    @classmethod
    def load(cls, path: Path) -> "BuildDescriptorDocument":
        with open(path, "r", encoding="utf-8", newline="") as f:
            return cls(path=path, text=f.read())

    def apply_edit(self, edit: PomEdit) -> None:
        """Apply ``edit`` to the snapshot and write the result to disk."""
        new_text = edit.apply(self.text)
        with open(self.path, "w", encoding="utf-8", newline="") as f:
            f.write(new_text)
        self.text = new_text


def get_indentation(text: str, offset: int) -> str:
    """Leading whitespace of the line holding ``offset``.

    For ``\\t\\t<dependencies>`` and the offset of ``<`` returns ``"\\t\\t"``.
    """
    line_start = text.rfind("\n", 0, offset) + 1
    match = re.match(r"[ \t]*", text[line_start:offset])
    return match.group(0)


def _insertion_edit(text: str, parent: XmlElement, node: PomNode, indent: str, eol: str) -> TextEdit:
    base_indent = get_indentation(text, parent.start)
    prefix = base_indent + indent
    lines = node.get_text_lines(indent)

    if parent.self_closing:
        # <dependencies/> becomes <dependencies>...</dependencies>.
        start_tag = re.sub(r"\s*/>$", ">", text[parent.start:parent.start_tag_end])
        body = "".join(f"{eol}{prefix}{line}" for line in lines)
        new_text = f"{start_tag}{body}{eol}{base_indent}</{parent.name}>"
        return TextEdit(parent.start, parent.end, new_text)

    if parent.close_start is None:
        raise UserError(f"Element <{parent.name}> is not closed.")

    offset = parent.close_start
    line_start = text.rfind("\n", 0, offset) + 1
    if text[line_start:offset].strip() == "":
        # <tab><tab>|</dependencies>  =>  |<tab><tab></dependencies>
        new_text = "".join(f"{prefix}{line}{eol}" for line in lines)
        logger.debug("Inserting %d lines at the start of the line of </%s>", len(lines), parent.name)
        return TextEdit(line_start, line_start, new_text)

    new_text = "".join(f"{eol}{prefix}{line}" for line in lines) + eol + base_indent
    logger.debug("Inserting %d lines before </%s>", len(lines), parent.name)
    return TextEdit(offset, offset, new_text)


def get_project_element(text: str) -> XmlElement:
    """Return the single ``<project>`` element of a POM.

    Raises:
        UserError: If the text holds no ``<project>`` element or several.
    """
    projects = find_elements(text, "project")
    if len(projects) != 1:
        raise UserError("Only support POM file with single <project> node.")
    return projects[0]


def build_pom_edit(text: str, artifacts: list, boms: list, indent: str = "    ", eol: str = PLATFORM_EOL) -> PomEdit:
    """Compute the edit adding ``artifacts`` and ``boms`` to a POM.

    Dependencies go before ``</dependencies>`` of the project, or into a new
    ``<dependencies>`` block before ``</project>``. BOMs go into
    ``<dependencyManagement><dependencies>``, creating whichever of the two
    levels is missing.

    Args:
        text: The POM content.
        artifacts: Starters to add as ``<dependency>`` elements.
        boms: BOMs to import; may be empty.
        indent: One indentation unit (tab or spaces).
        eol: Line ending used for the inserted lines.

    Raises:
        UserError: If the POM does not have exactly one ``<project>`` element.
    """
    project = get_project_element(text)
    insertions = []

    if artifacts:
        dependencies = project.find_child("dependencies")
        if dependencies is not None:
            insertions.append((dependencies, DependencyNodes(artifacts)))
        else:
            insertions.append((project, DependencyNodes(artifacts, init_parent=True)))

    if boms:
        dep_mgmt = project.find_child("dependencyManagement")
        if dep_mgmt is not None:
            managed = dep_mgmt.find_child("dependencies")
            if managed is not None:
                insertions.append((managed, BomNodes(boms)))
            else:
                insertions.append((dep_mgmt, BomNodes(boms, parents=["dependencies"])))
        else:
            insertions.append((project, BomNodes(boms, parents=["dependencies", "dependencyManagement"])))

    # One edit per target element; a self-closing <project/> is expanded once.
    grouped = {}
    for parent, node in insertions:
        grouped.setdefault(id(parent), (parent, []))[1].append(node)

    edit = PomEdit()
    for parent, nodes in grouped.values():
        node = nodes[0] if len(nodes) == 1 else NodeGroup(nodes)
        edit.edits.append(_insertion_edit(text, parent, node, indent, eol))
    return edit


def update_pom(
    document: BuildDescriptorDocument,
    artifacts: list,
    boms: list,
    indent: str = "    ",
    eol: str = PLATFORM_EOL,
) -> PomEdit:
    """Patch ``document`` in place with one edit.

    Nothing is written when the precondition on ``<project>`` fails.
    """
    edit = build_pom_edit(document.text, artifacts, boms, indent=indent, eol=eol)
    document.apply_edit(edit)
    logger.info("Applied %d insertion(s) to %s", len(edit.edits), document.path)
    return edit
