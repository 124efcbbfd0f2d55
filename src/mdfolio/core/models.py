"""Data models shared by the conversion pipelines"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from mdfolio.config import Settings


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Heading:
    """A heading found in converted HTML or raw Markdown; never mutated after extraction."""
    level:           int                 # 1-6
    text:            str
    source_position: int                 # block index (HTML) or 1-based line (Markdown)
    anchor:          str = ""
    classes:         tuple[str, ...] = ()


@dataclass
class DocumentStructure:
    """Classifier output: which leading headings are metadata and how far to promote the rest."""
    headings:          list[Heading] = field(default_factory=list)
    metadata_headings: list[Heading] = field(default_factory=list)   # always a prefix of headings
    content_headings:  list[Heading] = field(default_factory=list)
    levels_to_adjust:  int = 0
    warnings:          list[str] = field(default_factory=list)

    @property
    def title(self) -> Optional[Heading]:
        return next((h for h in self.metadata_headings if h.level == 1), None)

    @property
    def author(self) -> Optional[Heading]:
        return next((h for h in self.metadata_headings if h.level == 2), None)


class DocxOptions(BaseModel):
    """Switches for the DOCX to Markdown converter."""
    extract_metadata: bool = True
    adjust_headings:  bool = True
    scene_separators: bool = True
    clean_whitespace: bool = True
    scene_break_threshold: int = Field(default=2, ge=1)

    @classmethod
    def from_settings(cls, settings: Settings) -> "DocxOptions":
        return cls(
            extract_metadata=settings.extract_metadata,
            adjust_headings=settings.adjust_headings,
            scene_separators=settings.scene_separators,
            clean_whitespace=settings.clean_whitespace,
            scene_break_threshold=settings.scene_break_threshold,
        )


class DocxMetadata(BaseModel):
    title:  Optional[str] = None
    author: Optional[str] = None


class DocxResult(BaseModel):
    """DOCX conversion output; metadata is returned apart from the Markdown body."""
    content:  str
    metadata: DocxMetadata = Field(default_factory=DocxMetadata)
    warnings: list[str] = Field(default_factory=list)


class BookFrontmatter(BaseModel):
    """Known frontmatter keys of a Markdown book; unknown keys are kept as extras."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    title:      Optional[str] = None
    author:     Optional[str] = None
    subtitle:   Optional[str] = None
    publisher:  Optional[str] = None
    isbn:       Optional[str] = None
    copyright:  Optional[str] = None
    date:       Optional[str] = None
    lang:       Optional[str] = None
    dedication: Optional[str] = None
    colophon:   Optional[str] = None
    toc:        Optional[bool] = None
    toc_depth:  Optional[int] = Field(default=None, alias="tocDepth")

    @field_validator(
        "title", "author", "subtitle", "publisher", "isbn", "copyright",
        "date", "lang", "dedication", "colophon", mode="before",
    )
    @classmethod
    def _scalar_to_str(cls, value: Any) -> Any:
        # YAML turns dates and numbers (years, ISBNs) into non-strings
        if value is None or isinstance(value, (str, list, dict)):
            return value
        return str(value)

    @classmethod
    def _input_keys(cls, name: str) -> tuple[str, ...]:
        # an error may name a field by its alias or by its attribute name
        for attr, info in cls.model_fields.items():
            if name in (attr, info.alias):
                return (attr, info.alias) if info.alias else (attr,)
        return (name,)

    @classmethod
    def from_metadata(cls, metadata: dict[str, Any]) -> "BookFrontmatter":
        """Validate parsed frontmatter, dropping known keys whose values do not fit their field."""
        data = dict(metadata)
        while True:
            try:
                return cls.model_validate(data)
            except ValidationError as e:
                bad = {
                    key
                    for err in e.errors() if err['loc']
                    for key in cls._input_keys(str(err['loc'][0])) if key in data
                }
                if not bad:
                    raise
                logger.warning("Ignoring invalid frontmatter value(s): %s", ", ".join(sorted(map(str, bad))))
                for key in bad:
                    del data[key]


@dataclass(frozen=True)
class Section:
    """One top-level <section> of rendered HTML."""
    title: str
    html:  str
