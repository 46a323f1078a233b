"""Image lifting: hoist images out of inline wrappers so each becomes a top-level block"""

import copy
import logging

from cmsfix.core.html.dom import (
    Element, Fragment, Node, find_path, has_media, iter_elements, node_at,
    replace_at, text_content,
)


LOGGER = logging.getLogger(__name__)

ALLOWED_ANCESTORS = frozenset({"p", "div", "figure", "span", "a"})
PRUNE_TAGS = frozenset({"p", "div", "span", "strong", "em", "a"})
MAX_DEPTH = 5


def _is_empty(node: Element) -> bool:
    """No visible text and no media; such split halves are dropped."""
    return not text_content(node).strip() and not has_media(node)


def _split(ancestor: Element, index: int) -> Fragment:
    """Split ancestor around children[index] into [before?, child, after?] with the same tag and attrs."""
    before = Element(ancestor.tag, dict(ancestor.attrs), ancestor.children[:index])
    after = Element(ancestor.tag, dict(ancestor.attrs), ancestor.children[index + 1:])
    parts: list[Node] = [] if _is_empty(before) else [before]
    parts.append(ancestor.children[index])
    if not _is_empty(after):
        parts.append(after)
    return Fragment(parts)


def lift_image(root: Element, image: Element, allowed=ALLOWED_ANCESTORS, max_depth: int = MAX_DEPTH) -> Element:
    """Walk up from image, splitting allowed ancestors around it. Returns the new root.

    Every examined ancestor counts toward max_depth whether or not it was split.
    Ancestors outside allowed (table cells, lists, ...) are passed through intact.
    """
    path = find_path(root, image)
    if path is None:
        return root
    ancestor = path[:-1]
    depth = 0
    while ancestor and depth < max_depth:
        node = node_at(root, ancestor)
        depth += 1
        if node.tag in allowed:
            root = replace_at(root, ancestor, _split(node, path[len(ancestor)]))
            path = find_path(root, image)
        ancestor = ancestor[:-1]
    return root


def normalize(root: Element, allowed=ALLOWED_ANCESTORS, max_depth: int = MAX_DEPTH) -> Element:
    """Return a copy of root with every image hoisted out of its allowed wrappers."""
    root = copy.deepcopy(root)
    images = list(iter_elements(root, "img"))
    for image in images:
        root = lift_image(root, image, allowed, max_depth)
    LOGGER.debug("Lifted %d image(s) under <%s>", len(images), root.tag)
    return root


def prune_empty(node: Element, tags=PRUNE_TAGS) -> Element:
    """Return a copy of node without elements of tags that hold no text and no child elements."""
    children: list[Node] = []
    for child in node.children:
        if isinstance(child, Element):
            child = prune_empty(child, tags)
            if (child.tag in tags and not text_content(child).strip()
                    and not any(isinstance(c, Element) for c in child.children)):
                continue
        children.append(child)
    return Element(node.tag, dict(node.attrs), children)


def count_images(root: Element) -> int:
    return sum(1 for _ in iter_elements(root, "img"))


def top_level_images(root: Element) -> int:
    return sum(1 for c in root.children if isinstance(c, Element) and c.tag == "img")


def nested_images(root: Element, allowed=ALLOWED_ANCESTORS) -> int:
    """Count images that still sit inside an allowed wrapper below root."""
    def walk(node: Node, inside: bool) -> int:
        count = 0
        for child in getattr(node, "children", ()):
            if isinstance(child, Element):
                if child.tag == "img" and inside:
                    count += 1
                count += walk(child, inside or child.tag in allowed)
        return count
    return walk(root, False)
