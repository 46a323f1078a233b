"""Unit tests for core/embeds.py"""

from cmsfix.core.embeds import promote_embeds
from cmsfix.core.models import ImageBlock, InlineObject, TextBlock, VideoBlock


def _block(children: list) -> TextBlock:
    return TextBlock.model_validate({"_type": "block", "_key": "b", "style": "normal", "children": children})


VIDEO = {"_type": "video", "_key": "v1", "videoId": "abc", "title": "Talk"}


def test_video_only_block_is_replaced():
    """A wrapper holding nothing but a video is removed and the video promoted."""
    fix = promote_embeds([_block([{"_type": "span", "text": " "}, VIDEO])])
    assert len(fix.body) == 1
    video = fix.body[0]
    assert isinstance(video, VideoBlock)
    assert video.video_id == "abc"
    assert video.key == "v1"
    assert video.type == "youtube"
    assert "removed empty text block" in fix.changes[0]


def test_text_kept_and_embeds_follow():
    """A wrapper with real text keeps its spans; embeds follow it in order."""
    image = {"_type": "image", "asset": {"_ref": "image-1"}}
    fix = promote_embeds([_block([{"_type": "span", "text": "Look:"}, image, VIDEO])])
    text, img, vid = fix.body
    assert isinstance(text, TextBlock)
    assert text.text == "Look:"
    assert not any(isinstance(c, InlineObject) for c in text.children)
    assert isinstance(img, ImageBlock) and img.key
    assert isinstance(vid, VideoBlock)


def test_clean_body_unchanged():
    body = [_block([{"_type": "span", "text": "Fine"}]), ImageBlock(key="i")]
    fix = promote_embeds(body)
    assert fix.changes == []
    assert fix.body == body


def test_no_text_block_holds_media_after_fix():
    body = [
        _block([{"_type": "span", "text": "a"}, VIDEO]),
        _block([VIDEO]),
        _block([{"_type": "span", "text": "b"}]),
    ]
    fix = promote_embeds(body)
    for block in fix.body:
        if isinstance(block, TextBlock):
            assert all(c.type_ not in {"video", "image"} for c in block.children)
    assert sum(isinstance(b, VideoBlock) for b in fix.body) == 2
