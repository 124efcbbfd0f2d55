"""Book-building models: metadata, chapters, TOC page settings and the frozen book snapshot"""

from dataclasses import dataclass, field
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, field_validator


DEFAULT_ROLE = "chapter"
CHAPTER_ID_PATTERN = r'^[A-Za-z0-9][A-Za-z0-9._-]*$'


class BookMetadata(BaseModel):
    """Dublin Core metadata. Empty fields are filled in at generation time, not here."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    title:       StrictStr = ""
    author:      StrictStr = ""
    language:    StrictStr = "es"
    publisher:   StrictStr = ""
    date:        StrictStr = ""
    description: StrictStr = ""
    subject:     StrictStr = ""
    rights:      StrictStr = ""
    identifier:  StrictStr = ""


class Chapter(BaseModel):
    """One content document of the book; content is an HTML fragment, not a full document."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id:          StrictStr = Field(..., min_length=1, pattern=CHAPTER_ID_PATTERN)
    title:       StrictStr = Field(..., min_length=1)
    content:     StrictStr = Field(..., min_length=1)
    role:        StrictStr = DEFAULT_ROLE
    show_in_toc: StrictBool = Field(default=True, alias="showInToc")

    @field_validator("role", mode="before")
    @classmethod
    def _default_role(cls, value):
        return value or DEFAULT_ROLE


class TocPageConfig(BaseModel):
    """Visible index page, separate from the navigation document."""
    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    title:   str = "Índice"
    depth:   int = 1

    @field_validator("depth", mode="before")
    @classmethod
    def _clamp_depth(cls, value):
        return min(max(int(value or 1), 1), 3)


@dataclass(frozen=True)
class CoverInfo:
    """Decoded cover image; recomputed from the raw payload on every generation."""
    mime:      str
    extension: str
    data:      bytes


@dataclass(frozen=True)
class TocEntry:
    level: int          # chapters are 1, in-chapter headings keep their heading level
    title: str
    href:  str


@dataclass(frozen=True)
class BookSpec:
    """Immutable snapshot of a book, consumed by the archive writer."""
    uuid:       str
    metadata:   BookMetadata
    chapters:   tuple[Chapter, ...]
    cover:      Optional[Union[str, bytes]] = None
    stylesheet: str = ""
    body_class: str = ""
    toc_page:   TocPageConfig = field(default_factory=TocPageConfig)
