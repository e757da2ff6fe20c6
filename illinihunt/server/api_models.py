"""Pydantic request models for the HTTP API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class CreateProjectRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    tagline: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    user_id: str
    category_id: int | None = None
    image_url: str | None = None
    website_url: str | None = None
    github_url: str | None = None
    video_url: str | None = None
    status: str = "active"


class ProjectStatusRequest(BaseModel):
    status: str


class UserRequest(BaseModel):
    """Body for per-user toggles: votes, likes, bookmarks, collection deletes."""

    user_id: str


class CreateCommentRequest(BaseModel):
    user_id: str
    content: str = Field(min_length=1, max_length=2000)
    parent_id: int | None = None


class CreateCategoryRequest(BaseModel):
    name: str = Field(min_length=1)
    description: str | None = None
    icon: str | None = None
    color: str = "#FF6B35"


class CreateCollectionRequest(BaseModel):
    user_id: str
    name: str = Field(min_length=1, max_length=100)
    description: str | None = None
    is_public: bool = False


class UpdateCollectionRequest(BaseModel):
    user_id: str
    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = None
    is_public: bool | None = None


class CollectionProjectRequest(BaseModel):
    user_id: str
    project_id: int
