"""Unit tests for core/styles.py"""

from cmsfix.core.models import ImageBlock, TextBlock
from cmsfix.core.styles import downgrade_headings


def _block(style: str, text: str = "Heading") -> TextBlock:
    return TextBlock.model_validate({
        "_type": "block", "style": style,
        "children": [{"_type": "span", "text": text}],
    })


def test_downgrade_exact():
    """h5/h6 become h4; other styles are untouched and the count is exact."""
    body = [_block("h5"), _block("h3"), _block("h6"), _block("normal")]
    result = downgrade_headings(body, {"h5", "h6"}, "h4")
    assert [b.style for b in result.body] == ["h4", "h3", "h4", "normal"]
    assert result.count == 2


def test_downgrade_is_pure():
    """The input body keeps its original styles."""
    body = [_block("h5")]
    downgrade_headings(body)
    assert body[0].style == "h5"


def test_downgrade_reports_diff_lines():
    """Each change renders as an audit line with index, styles and text preview."""
    body = [_block("normal"), _block("h6", "Deep   heading")]
    result = downgrade_headings(body)
    assert [str(c) for c in result.changes] == ['[1] h6→h4: "Deep heading"']


def test_downgrade_skips_non_text_blocks():
    """Non-text blocks pass through as the same objects."""
    image = ImageBlock()
    result = downgrade_headings([image, _block("h5")])
    assert result.body[0] is image
    assert result.count == 1


def test_downgrade_no_changes():
    result = downgrade_headings([_block("h2")], {"h5"}, "h4")
    assert result.count == 0
    assert result.changes == []
