"""Offset-preserving XML tag lexer.

Locates elements in raw XML text without re-serializing anything, so a
caller can insert text at exact offsets. Comments, CDATA sections,
processing instructions and doctype declarations are skipped. The lexer is
tolerant: unmatched closing tags are ignored and elements left open at the
end of the input have no closing offset.
"""

import re
from dataclasses import dataclass, field
from typing import Optional

_START_TAG_RE = re.compile(
    r"<([A-Za-z_][\w.:-]*)"
    r"((?:\s+[^\s=/>]+(?:\s*=\s*(?:\"[^\"]*\"|'[^']*'|[^\s>]+))?)*)"
    r"\s*(/?)>",
    re.DOTALL,
)
_END_TAG_RE = re.compile(r"</([A-Za-z_][\w.:-]*)\s*>")

# Constructs skipped wholesale: (opening marker, closing marker).
_SKIPPED = (
    ("<!--", "-->"),
    ("<![CDATA[", "]]>"),
    ("<?", "?>"),
)


@dataclass
class XmlElement:
    """An element located in the source text.

    Attributes:
        name: Tag name as written, including any namespace prefix.
        start: Offset of the ``<`` opening the start tag.
        start_tag_end: Offset just past the start tag's ``>``.
        close_start: Offset of the ``</`` of the closing tag, ``None`` when
            the element is self-closing or never closed.
        end: Offset just past the element, ``None`` when never closed.
        self_closing: Whether the element was written as ``<name/>``.
        children: Child elements in document order.
    """
    name: str
    start: int
    start_tag_end: int
    close_start: Optional[int] = None
    end: Optional[int] = None
    self_closing: bool = False
    children: list = field(default_factory=list)

    @property
    def local_name(self) -> str:
        return self.name.rsplit(":", 1)[-1]

    def find_child(self, local_name: str) -> Optional["XmlElement"]:
        """First direct child with the given local name."""
        for child in self.children:
            if child.local_name == local_name:
                return child
        return None


def _skip_markup(text: str, pos: int) -> Optional[int]:
    for opener, closer in _SKIPPED:
        if text.startswith(opener, pos):
            found = text.find(closer, pos + len(opener))
            return len(text) if found < 0 else found + len(closer)
    if text.startswith("<!", pos):
        # Doctype, possibly with an internal subset in brackets.
        bracket = text.find("[", pos)
        close = text.find(">", pos)
        if 0 <= bracket < close:
            found = text.find("]>", bracket)
            return len(text) if found < 0 else found + 2
        return len(text) if close < 0 else close + 1
    return None


def parse_elements(text: str) -> list:
    """Lex ``text`` into a forest of elements.

    Returns:
        The top-level elements in document order; nested elements are
        reachable through ``children``.
    """
    roots = []
    stack = []
    pos = 0
    length = len(text)
    while pos < length:
        pos = text.find("<", pos)
        if pos < 0:
            break

        skipped_to = _skip_markup(text, pos)
        if skipped_to is not None:
            pos = skipped_to
            continue

        end_match = _END_TAG_RE.match(text, pos)
        if end_match:
            name = end_match.group(1)
            for depth in range(len(stack) - 1, -1, -1):
                if stack[depth].name == name:
                    element = stack[depth]
                    element.close_start = pos
                    element.end = end_match.end()
                    del stack[depth:]
                    break
            pos = end_match.end()
            continue

        start_match = _START_TAG_RE.match(text, pos)
        if not start_match:
            pos += 1
            continue

        element = XmlElement(
            name=start_match.group(1),
            start=pos,
            start_tag_end=start_match.end(),
            self_closing=start_match.group(3) == "/",
        )
        if element.self_closing:
            element.end = element.start_tag_end
        (stack[-1].children if stack else roots).append(element)
        if not element.self_closing:
            stack.append(element)
        pos = start_match.end()
    return roots


def find_elements(text: str, local_name: str) -> list:
    """Every element, at any depth, whose local name is ``local_name``."""
    found = []
    pending = list(reversed(parse_elements(text)))
    while pending:
        element = pending.pop()
        if element.local_name == local_name:
            found.append(element)
        pending.extend(reversed(element.children))
    return found
