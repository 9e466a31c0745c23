"""Normalized content models: blocks, rich-text spans, and posts"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, computed_field

from notionpub.core.utils.slug import slugify


class BlockKind(str, Enum):
    """Restrict normalized blocks to a predefined set of content kinds"""
    heading1 = "heading1"
    heading2 = "heading2"
    heading3 = "heading3"
    paragraph = "paragraph"
    bulleted_item = "bulleted_item"
    numbered_item = "numbered_item"
    quote = "quote"
    code = "code"
    image = "image"
    divider = "divider"
    callout = "callout"
    table = "table"
    unsupported = "unsupported"


HEADING_LEVELS: dict[BlockKind, int] = {
    BlockKind.heading1: 1,
    BlockKind.heading2: 2,
    BlockKind.heading3: 3,
}


class Span(BaseModel):
    """One rich-text fragment with its inline annotations."""
    text: str
    bold: bool = False
    italic: bool = False
    strikethrough: bool = False
    code: bool = False
    href: Optional[str] = None


class Segment(BaseModel):
    """A run of expanded text; markup marks macro output that must reach the page unescaped."""
    text: str
    markup: bool = False


class TextBlock(BaseModel):
    """Headings, paragraphs, list items, quotes and callouts."""
    kind: Literal[
        BlockKind.heading1, BlockKind.heading2, BlockKind.heading3,
        BlockKind.paragraph, BlockKind.bulleted_item, BlockKind.numbered_item,
        BlockKind.quote, BlockKind.callout,
    ]
    id: Optional[str] = None
    text: str = ""
    rich_spans: list[Span] = Field(default_factory=list)
    segments: list[Segment] = Field(default_factory=list)    # set once macros expanded to markup


class CodeBlock(BaseModel):
    kind: Literal[BlockKind.code] = BlockKind.code
    id: Optional[str] = None
    code: str = ""
    language: str = "text"


class ImageContent(BaseModel):
    url: str
    caption: str = ""
    alt_text: str


class ImageBlock(BaseModel):
    kind: Literal[BlockKind.image] = BlockKind.image
    id: Optional[str] = None
    image: ImageContent


class DividerBlock(BaseModel):
    kind: Literal[BlockKind.divider] = BlockKind.divider
    id: Optional[str] = None


class TableContent(BaseModel):
    """Table layout; rows -> cells -> text fragments, fragment grouping preserved."""
    column_count: int
    has_column_header: bool = False
    has_row_header: bool = False
    rows: list[list[list[str]]] = Field(default_factory=list)


class TableBlock(BaseModel):
    kind: Literal[BlockKind.table] = BlockKind.table
    id: Optional[str] = None
    table: TableContent


class UnsupportedBlock(BaseModel):
    """Unknown or malformed source block; text is best-effort only."""
    kind: Literal[BlockKind.unsupported] = BlockKind.unsupported
    id: Optional[str] = None
    source_type: str = ""
    text: Optional[str] = None
    segments: list[Segment] = Field(default_factory=list)


Block = Annotated[
    Union[TextBlock, CodeBlock, ImageBlock, DividerBlock, TableBlock, UnsupportedBlock],
    Field(discriminator="kind"),
]


def block_text(block: Block) -> str | None:
    """Return the plain text carried by a block, or None for kinds without one."""
    if isinstance(block, (TextBlock, UnsupportedBlock)):
        return block.text
    return None


class PostSummary(BaseModel):
    """Listing metadata for one published entry; slug is always derived from title."""
    title: str
    source_id: str
    published_at: Optional[datetime] = None
    tags: list[str] = Field(default_factory=list)    # deduplicated, source order
    excerpt: Optional[str] = None

    @computed_field
    @property
    def slug(self) -> str:
        return slugify(self.title)


class Post(PostSummary):
    """A fully fetched entry with its normalized (and later macro-expanded) blocks."""
    blocks: list[Block] = Field(default_factory=list)

    @classmethod
    def from_summary(cls, summary: PostSummary, blocks: list[Block]) -> "Post":
        return cls(**summary.model_dump(exclude={"slug"}), blocks=blocks)

    def summary(self) -> PostSummary:
        return PostSummary(**self.model_dump(exclude={"slug", "blocks"}))
