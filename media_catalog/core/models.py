# Copyright (c) 2025 Trae AI. All rights reserved.

from enum import Enum
from pathlib import Path
from typing import Annotated, Any, List, Literal, Optional, Union
from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    TypeAdapter,
    field_validator,
)


class RoleKind(Enum):
    IMAGE = "image"
    VIDEO = "video"
    EPISODE = "episode"


class Bucket(Enum):
    IMAGES = "images"
    MOVIES = "movies"


class UploadRole(BaseModel):
    """
    Semantic role of an uploaded part, derived from its form field name.
    `number` is only set for episodes.
    """

    model_config = ConfigDict(frozen=True)

    kind: RoleKind
    number: Optional[int] = None

    @property
    def bucket(self) -> Bucket:
        if self.kind == RoleKind.IMAGE:
            return Bucket.IMAGES
        return Bucket.MOVIES


class UploadedPart(BaseModel):
    """
    A file part as received from the transport layer.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    field_name: str
    filename: str = ""
    stream: Any


class StoredAsset(BaseModel):
    """
    Represents an uploaded part after it has been written to disk.
    """

    role: UploadRole
    field_name: str
    original_filename: str
    path: Path
    url: str
    size: int = 0


class Episode(BaseModel):
    # Older catalogs hold null for episode parts without a usable number
    number: Optional[int] = None
    url: str
    title: str


class EntryBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    title: Optional[str] = None
    category: Optional[str] = None
    image: str = ""


class MovieEntry(EntryBase):
    type: Literal["movie"] = "movie"
    video_url: str = Field("", alias="videoUrl")

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, value):
        # Anything that is not a series is stored as a movie
        return "movie"


class SeriesEntry(EntryBase):
    type: Literal["series"] = "series"
    episodes: List[Episode] = Field(default_factory=list)


def _entry_kind(value) -> str:
    if isinstance(value, dict):
        kind = value.get("type")
    else:
        kind = getattr(value, "type", None)
    return "series" if kind == "series" else "movie"


CatalogEntry = Annotated[
    Union[
        Annotated[MovieEntry, Tag("movie")],
        Annotated[SeriesEntry, Tag("series")],
    ],
    Discriminator(_entry_kind),
]

catalog_adapter = TypeAdapter(List[CatalogEntry])


OPTIONAL_TEXT_FIELDS = ("title", "category")


def entry_to_dict(entry: EntryBase) -> dict:
    # Absent title or category is left out of the document rather than written as null
    missing = {name for name in OPTIONAL_TEXT_FIELDS if getattr(entry, name) is None}
    return entry.model_dump(mode="json", by_alias=True, exclude=missing)


def entries_to_list(entries) -> List[dict]:
    return [entry_to_dict(e) for e in entries]


def referenced_urls(entry: EntryBase) -> List[str]:
    """
    Every asset reference held by an entry, image first.
    """
    urls = []
    if entry.image:
        urls.append(entry.image)
    if isinstance(entry, SeriesEntry):
        urls.extend(ep.url for ep in entry.episodes if ep.url)
    elif isinstance(entry, MovieEntry) and entry.video_url:
        urls.append(entry.video_url)
    return urls
