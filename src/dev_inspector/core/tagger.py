"""Build-time source tagging.

Every element of a JSX, TSX or HTML syntax tree receives the three
``data-source-*`` attributes naming the file, line and column it was
written at. Tagging is purely syntactic and idempotent: an element that
already carries any of the three attributes is left alone.
"""

from __future__ import annotations

import html
import logging
import shutil
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import cast

from tree_sitter import Node
from tree_sitter_language_pack import SupportedLanguage, get_parser

from dev_inspector.core.languages import is_taggable, normalize_language, resolve_language
from dev_inspector.models import SOURCE_ATTRS, SourceTag, TagEdit, TagResult

logger = logging.getLogger(__name__)

_JSX_TAG_TYPES = frozenset({"jsx_opening_element", "jsx_self_closing_element"})
_HTML_TAG_TYPES = frozenset({"start_tag", "self_closing_tag"})

_TAG_TYPES = {
    "javascript": _JSX_TAG_TYPES,
    "tsx": _JSX_TAG_TYPES,
    "html": _HTML_TAG_TYPES,
}

_PUNCTUATION = frozenset({"<", ">", "/", "/>"})

_SKIP_DIRS = frozenset({".git", "node_modules"})


def _walk(root: Node) -> Iterator[Node]:
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def _text(node: Node) -> str:
    return (node.text or b"").decode("utf-8", errors="replace")


def _element_name(node: Node, language: str) -> str | None:
    if language == "html":
        for child in node.children:
            if child.type == "tag_name":
                return _text(child).lower()
        return None
    name = node.child_by_field_name("name")
    return _text(name) if name is not None else None


def _attribute_names(node: Node, language: str) -> set[str]:
    names: set[str] = set()
    for child in node.children:
        if language == "html":
            if child.type != "attribute":
                continue
            for part in child.children:
                if part.type == "attribute_name":
                    names.add(_text(part).lower())
        elif child.type == "jsx_attribute" and child.child_count > 0:
            names.add(_text(child.children[0]))
    return names


def _insertion_offset(node: Node) -> int:
    for child in reversed(node.children):
        if child.type not in _PUNCTUATION:
            return child.end_byte
    return node.start_byte + 1


def _column(source: bytes, node: Node) -> int:
    line_start = node.start_byte - node.start_point[1]
    return len(source[line_start : node.start_byte].decode("utf-8", errors="replace"))


def _render_attributes(tag: SourceTag) -> bytes:
    parts = [f' {name}="{html.escape(value, quote=True)}"' for name, value in tag.to_attributes().items()]
    return "".join(parts).encode("utf-8")


def tag_source(source: str | bytes, file: str, language: str) -> TagResult:
    """Attach provenance attributes to every untagged element of *source*."""
    resolved_language = normalize_language(language)
    source_bytes = source.encode("utf-8") if isinstance(source, str) else source

    parser = get_parser(cast(SupportedLanguage, resolved_language))
    tree = parser.parse(source_bytes)
    tag_types = _TAG_TYPES[resolved_language]

    edits: list[TagEdit] = []
    insertions: list[tuple[int, bytes]] = []
    for node in _walk(tree.root_node):
        if node.type not in tag_types or node.is_missing:
            continue
        name = _element_name(node, resolved_language)
        if not name:
            continue
        if _attribute_names(node, resolved_language) & set(SOURCE_ATTRS):
            continue

        tag = SourceTag(file=file, line=node.start_point[0] + 1, column=_column(source_bytes, node))
        offset = _insertion_offset(node)
        insertions.append((offset, _render_attributes(tag)))
        edits.append(TagEdit(tag=tag, element=name, offset=offset))

    if not insertions:
        return TagResult(source=source_bytes.decode("utf-8", errors="replace"))

    chunks: list[bytes] = []
    cursor = 0
    for offset, payload in sorted(insertions, key=lambda item: item[0]):
        chunks.append(source_bytes[cursor:offset])
        chunks.append(payload)
        cursor = offset
    chunks.append(source_bytes[cursor:])

    return TagResult(source=b"".join(chunks).decode("utf-8", errors="replace"), edits=edits)


def _recorded_path(file_path: Path, root: str | Path | None) -> str:
    resolved = file_path.resolve()
    if root is None:
        return str(resolved)
    try:
        return resolved.relative_to(Path(root).resolve()).as_posix()
    except ValueError:
        return str(resolved)


def tag_file(path: str | Path, root: str | Path | None = None, language: str | None = None) -> TagResult:
    file_path = Path(path)
    resolved_language = resolve_language(language, file_path)

    try:
        source_bytes = file_path.read_bytes()
    except FileNotFoundError:
        raise FileNotFoundError(f"File not found: {path}") from None

    return tag_source(source_bytes, _recorded_path(file_path, root), resolved_language)


def _iter_sources(source_dir: Path, out_dir: Path) -> Iterator[Path]:
    for path in sorted(source_dir.rglob("*")):
        if not path.is_file():
            continue
        rel_parts = path.relative_to(source_dir).parts
        if any(part in _SKIP_DIRS for part in rel_parts):
            continue
        if path.resolve().is_relative_to(out_dir):
            continue
        yield path


def _write_if_changed(target: Path, content: bytes) -> bool:
    if target.exists() and target.read_bytes() == content:
        return False
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(content)
    return True


def tag_tree(
    source_dir: str | Path,
    out_dir: str | Path,
    root: str | Path | None = None,
    paths: Iterable[Path] | None = None,
) -> list[Path]:
    """Mirror *source_dir* into *out_dir*, tagging every supported file.

    When *paths* is given only those files are processed. Returns the
    output files that were (re)written.
    """
    source_root = Path(source_dir).resolve()
    out_root = Path(out_dir).resolve()
    project_root = root if root is not None else source_root

    candidates = (
        [Path(p).resolve() for p in paths] if paths is not None else list(_iter_sources(source_root, out_root))
    )

    written: list[Path] = []
    for path in candidates:
        if not path.is_file() or not path.is_relative_to(source_root):
            continue
        target = out_root / path.relative_to(source_root)
        if is_taggable(path):
            result = tag_file(path, root=project_root)
            if _write_if_changed(target, result.source.encode("utf-8")):
                logger.info("Tagged %d element(s) in %s", len(result.edits), path)
                written.append(target)
        elif _write_if_changed(target, path.read_bytes()):
            shutil.copystat(path, target)
            written.append(target)
    return written
