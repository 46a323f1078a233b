"""HTML parsing into the article DOM model and serialization back to markup"""

from html import escape

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString, Tag

from cmsfix.core.html.dom import RAW_TEXT_TAGS, VOID_TAGS, Element, Fragment, Node, Text, text_content


ROOT_TAG = "div"


def _convert(tag: Tag) -> Element:
    """Convert a BeautifulSoup tag (and subtree) to an Element; comments and doctypes are dropped."""
    attrs = {
        k: " ".join(v) if isinstance(v, list) else str(v)
        for k, v in tag.attrs.items()
    }
    children: list[Node] = []
    for child in tag.children:
        if isinstance(child, Tag):
            children.append(_convert(child))
        elif isinstance(child, NavigableString) and not isinstance(child, PreformattedString):
            children.append(Text(str(child)))
    name = tag.name if isinstance(tag, Tag) and tag.name != "[document]" else ROOT_TAG
    return Element(name, attrs, children)


def parse_html(html: str, selector: str = ".post-content") -> Element:
    """Parse html and return the content container as an Element.

    The container is the first match of selector, else <article>, else <body>,
    else the whole document wrapped in a div.
    """
    soup = BeautifulSoup(html, "html.parser")
    container = (selector and soup.select_one(selector)) or soup.find("article") or soup.body or soup
    return _convert(container)


def to_html(node: Node) -> str:
    """Serialize node (including its own tag) to HTML."""
    if isinstance(node, Text):
        return escape(node.value, quote=False)
    if isinstance(node, Fragment):
        return inner_html(node)
    attrs = "".join(f' {k}="{escape(v)}"' for k, v in node.attrs.items())
    if node.tag in VOID_TAGS:
        return f"<{node.tag}{attrs}/>"
    if node.tag in RAW_TEXT_TAGS:
        return f"<{node.tag}{attrs}>{text_content(node)}</{node.tag}>"
    return f"<{node.tag}{attrs}>{inner_html(node)}</{node.tag}>"


def inner_html(node: Node) -> str:
    return "".join(to_html(c) for c in node.children)
