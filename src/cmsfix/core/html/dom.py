"""Article DOM model: element, text and fragment nodes with pure path-based edits

Nodes compare by identity. Edits never mutate a node in place; they rebuild the
spine from the root down to the edited parent and return the new root, so a
caller always holds a value rather than a live handle into a changing tree.
"""

from dataclasses import dataclass, field
from typing import Iterator, Optional, Union


VOID_TAGS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
})
MEDIA_TAGS = frozenset({"img", "iframe", "video"})
# Elements whose text is raw: serialized verbatim, never escaped.
RAW_TEXT_TAGS = frozenset({"script", "style"})


@dataclass(eq=False)
class Text:
    value: str


@dataclass(eq=False)
class Element:
    tag:      str
    attrs:    dict[str, str] = field(default_factory=dict)
    children: list["Node"] = field(default_factory=list)


@dataclass(eq=False)
class Fragment:
    """Ordered nodes with no element of their own; spliced into the parent on insert."""
    children: list["Node"] = field(default_factory=list)


Node = Union[Element, Text, Fragment]
Path = tuple[int, ...]


def text_content(node: Node) -> str:
    """Concatenated text of node and all descendants."""
    if isinstance(node, Text):
        return node.value
    return "".join(text_content(c) for c in node.children)


def iter_elements(node: Node, tag: str = None) -> Iterator[Element]:
    """Yield descendant elements of node in document order, optionally filtered by tag."""
    for child in getattr(node, "children", ()):
        if isinstance(child, Element) and (tag is None or child.tag == tag):
            yield child
        yield from iter_elements(child, tag)


def has_media(node: Node) -> bool:
    """True if node is or contains an img/iframe/video element."""
    if isinstance(node, Element) and node.tag in MEDIA_TAGS:
        return True
    return any(has_media(c) for c in getattr(node, "children", ()))


def find_path(root: Node, target: Node) -> Optional[Path]:
    """Child-index path from root to target (by identity), or None if target is not in the tree."""
    for i, child in enumerate(getattr(root, "children", ())):
        if child is target:
            return (i,)
        sub = find_path(child, target)
        if sub is not None:
            return (i, *sub)
    return None


def node_at(root: Node, path: Path) -> Node:
    node = root
    for i in path:
        node = node.children[i]
    return node


def replace_child(parent: Element, index: int, replacement: Node) -> Element:
    """Return a copy of parent with children[index] replaced; a Fragment is spliced in flat."""
    new = list(replacement.children) if isinstance(replacement, Fragment) else [replacement]
    children = parent.children[:index] + new + parent.children[index + 1:]
    return Element(parent.tag, dict(parent.attrs), children)


def replace_at(root: Element, path: Path, replacement: Node) -> Element:
    """Replace the node at path (non-empty) and return the rebuilt root."""
    if len(path) == 1:
        return replace_child(root, path[0], replacement)
    child = replace_at(root.children[path[0]], path[1:], replacement)
    return replace_child(root, path[0], child)
