"""Schémas Communauté / Community schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from motormate.models.post import ReactionKind, ReportReason


def _clean_tags(tags: list[str] | None) -> list[str] | None:
    if tags is None:
        return None
    cleaned = []
    for tag in tags:
        tag = tag.strip().lower()
        if not tag:
            continue
        if len(tag) > 30:
            raise ValueError("Each tag must be at most 30 characters")
        if tag not in cleaned:
            cleaned.append(tag)
    if len(cleaned) > 10:
        raise ValueError("A post can have at most 10 tags")
    return cleaned


class PostCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1, max_length=5000)
    tags: list[str] = []
    images: list[str] = []

    @field_validator("tags")
    @classmethod
    def _tags(cls, v: list[str]) -> list[str]:
        return _clean_tags(v)


class PostUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str | None = Field(None, min_length=1, max_length=200)
    content: str | None = Field(None, min_length=1, max_length=5000)
    tags: list[str] | None = None
    images: list[str] | None = None

    @field_validator("tags")
    @classmethod
    def _tags(cls, v: list[str] | None) -> list[str] | None:
        return _clean_tags(v)


class PostRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    author_id: int
    title: str
    content: str
    tags: list[str]
    images: list[str]
    likes_count: int
    dislikes_count: int
    is_approved: bool
    is_hidden: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ReactionResult(BaseModel):
    post_id: int
    reaction: ReactionKind | None = None
    likes_count: int
    dislikes_count: int


class PostReportCreate(BaseModel):
    reason: ReportReason
    description: str | None = Field(None, max_length=500)
