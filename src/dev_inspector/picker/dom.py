"""A minimal element tree for resolving pointer targets to source tags."""

from __future__ import annotations

import html
from collections.abc import Callable, Iterator, Mapping

from tree_sitter import Node
from tree_sitter_language_pack import get_parser

from dev_inspector.models import SourceTag

UI_MARKER_CLASS = "dev-inspector-ui"

_ELEMENT_TYPES = frozenset({"element", "script_element", "style_element"})


class Element:
    def __init__(
        self,
        tag_name: str,
        attributes: Mapping[str, str] | None = None,
        parent: Element | None = None,
    ) -> None:
        self.tag_name = tag_name.lower()
        self.attributes: dict[str, str] = dict(attributes or {})
        self.children: list[Element] = []
        self.parent: Element | None = None
        if parent is not None:
            parent.append(self)

    def __repr__(self) -> str:
        return f"<Element {self.tag_name} {self.attributes!r}>"

    def append(self, child: Element) -> Element:
        child.parent = self
        self.children.append(child)
        return child

    def get_attribute(self, name: str) -> str | None:
        return self.attributes.get(name)

    @property
    def class_list(self) -> list[str]:
        return (self.attributes.get("class") or "").split()

    @property
    def source_tag(self) -> SourceTag | None:
        return SourceTag.from_attributes(self.attributes)

    def ancestors(self, inclusive: bool = True) -> Iterator[Element]:
        node = self if inclusive else self.parent
        while node is not None:
            yield node
            node = node.parent

    def closest(self, predicate: Callable[[Element], bool]) -> Element | None:
        return next((node for node in self.ancestors() if predicate(node)), None)

    def iter(self) -> Iterator[Element]:
        yield self
        for child in self.children:
            yield from child.iter()

    def find(self, predicate: Callable[[Element], bool]) -> Element | None:
        return next((node for node in self.iter() if predicate(node)), None)


def closest_tagged(target: Element) -> Element | None:
    """Nearest element at or above *target* carrying a usable source tag."""
    return target.closest(lambda node: node.source_tag is not None)


def is_inside_ui(target: Element, marker: str = UI_MARKER_CLASS) -> bool:
    return target.closest(lambda node: marker in node.class_list) is not None


# ---------------------------------------------------------------------------
# Markup loading
# ---------------------------------------------------------------------------


def _text(node: Node) -> str:
    return (node.text or b"").decode("utf-8", errors="replace")


def _read_attribute(node: Node) -> tuple[str, str] | None:
    name: str | None = None
    value = ""
    for part in node.children:
        if part.type == "attribute_name":
            name = _text(part).lower()
        elif part.type == "attribute_value":
            value = _text(part)
        elif part.type == "quoted_attribute_value":
            value = "".join(_text(inner) for inner in part.children if inner.type == "attribute_value")
    if name is None:
        return None
    return name, html.unescape(value)


def _read_tag(node: Node) -> tuple[str, dict[str, str]] | None:
    name: str | None = None
    attributes: dict[str, str] = {}
    for child in node.children:
        if child.type == "tag_name":
            name = _text(child)
        elif child.type == "attribute":
            attribute = _read_attribute(child)
            if attribute is not None:
                attributes.setdefault(*attribute)
    return (name, attributes) if name else None


def _build(node: Node, parent: Element) -> None:
    for child in node.children:
        if child.type in _ELEMENT_TYPES:
            tag = next((c for c in child.children if c.type in ("start_tag", "self_closing_tag")), None)
            parsed = _read_tag(tag) if tag is not None else None
            if parsed is None:
                _build(child, parent)
                continue
            _build(child, Element(parsed[0], parsed[1], parent))
        elif child.type == "ERROR":
            _build(child, parent)


def load_document(markup: str | bytes) -> Element:
    """Parse rendered HTML into an element tree rooted at ``#document``."""
    source = markup.encode("utf-8") if isinstance(markup, str) else markup
    tree = get_parser("html").parse(source)
    document = Element("#document")
    _build(tree.root_node, document)
    return document
