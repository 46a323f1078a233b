"""Typed views over CMS documents and their rich-text bodies"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, ValidationError


DRAFT_PREFIX = "drafts."


class _CMSModel(BaseModel):
    """Base for CMS shapes: underscore fields by alias, unknown fields kept for round-trips."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def dump(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class Span(_CMSModel):
    type_: Literal["span"] = Field(default="span", alias="_type")
    key:   Optional[str] = Field(default=None, alias="_key")
    text:  str = ""
    marks: list[str] = []


class InlineObject(_CMSModel):
    """Any non-span child of a text block (inline image, nested video, ...)."""
    type_: str = Field(..., alias="_type")
    key:   Optional[str] = Field(default=None, alias="_key")


def _tagged(known: set[str], fallback: str):
    """Route a raw value to its model by _type; unknown types go to the catch-all tag."""
    def discriminate(value: Any) -> str:
        type_ = value.get("_type") if isinstance(value, dict) else getattr(value, "type_", None)
        return type_ if type_ in known else fallback
    return discriminate


Child = Annotated[
    Union[Annotated[Span, Tag("span")], Annotated[InlineObject, Tag("inline")]],
    Discriminator(_tagged({"span"}, "inline")),
]


class TextBlock(_CMSModel):
    type_:     Literal["block"] = Field(default="block", alias="_type")
    key:       Optional[str] = Field(default=None, alias="_key")
    style:     str = "normal"
    children:  list[Child] = []
    mark_defs: list[dict[str, Any]] = Field(default=[], alias="markDefs")

    @property
    def text(self) -> str:
        """Span texts joined without separator, trimmed."""
        return "".join(c.text for c in self.children if isinstance(c, Span)).strip()


class ImageBlock(_CMSModel):
    type_: Literal["image"] = Field(default="image", alias="_type")
    key:   Optional[str] = Field(default=None, alias="_key")


class CodeBlock(_CMSModel):
    type_:    Literal["code"] = Field(default="code", alias="_type")
    key:      Optional[str] = Field(default=None, alias="_key")
    language: Optional[str] = None
    code:     str = ""


class VideoBlock(_CMSModel):
    type_:    Literal["video"] = Field(default="video", alias="_type")
    key:      Optional[str] = Field(default=None, alias="_key")
    type:     str = "youtube"
    video_id: Optional[str] = Field(default=None, alias="videoId")
    title:    Optional[str] = None


class EmbedBlock(_CMSModel):
    """Any other block type (tables, callouts, ...), passed through untouched."""
    type_: str = Field(..., alias="_type")
    key:   Optional[str] = Field(default=None, alias="_key")


Block = Annotated[
    Union[
        Annotated[TextBlock, Tag("block")],
        Annotated[ImageBlock, Tag("image")],
        Annotated[CodeBlock, Tag("code")],
        Annotated[VideoBlock, Tag("video")],
        Annotated[EmbedBlock, Tag("embed")],
    ],
    Discriminator(_tagged({"block", "image", "code", "video"}, "embed")),
]


class Reference(_CMSModel):
    type_: Literal["reference"] = Field(default="reference", alias="_type")
    ref:   str = Field(..., alias="_ref")
    key:   Optional[str] = Field(default=None, alias="_key")


class Person(_CMSModel):
    id:   str = Field(..., alias="_id")
    name: Optional[str] = None


class DocumentHeader(_CMSModel):
    """Identity fields only; the body is carried as raw JSON and never validated."""
    id:    str = Field(..., alias="_id")
    type_: Optional[str] = Field(default=None, alias="_type")
    title: Optional[str] = None

    @property
    def is_draft(self) -> bool:
        return self.id.startswith(DRAFT_PREFIX)

    @property
    def base_id(self) -> str:
        """Identifier with the draft prefix removed."""
        return self.id[len(DRAFT_PREFIX):] if self.is_draft else self.id

    @property
    def label(self) -> str:
        return f'{self.id} "{self.title or ""}"'


class ContentDocument(DocumentHeader):
    type_:    str = Field(..., alias="_type")
    language: Optional[str] = None
    body:     Optional[list[Block]] = None
    authors:  Optional[list[Reference]] = None


def decode_documents(rows: list[dict[str, Any]], model: type[_CMSModel] = ContentDocument) -> tuple[list, list[tuple[Any, str]]]:
    """Validate fetched rows as model. Returns (decoded, rejected) where rejected holds (id, error) pairs."""
    decoded, rejected = [], []
    for row in rows:
        try:
            decoded.append(model.model_validate(row))
        except ValidationError as e:
            row_id = row.get("_id") if isinstance(row, dict) else None
            rejected.append((row_id, f"{e.error_count()} validation error(s): {e.errors()[0]['msg']}"))
    return decoded, rejected


def dump_body(body: list) -> list[dict[str, Any]]:
    """Serialize a decoded body back to CMS JSON."""
    return [b.dump() for b in body]
