"""Pydantic models for projects, categories, comments, collections, and ranked results."""

from __future__ import annotations

from pydantic import BaseModel

PROJECT_STATUSES = ("active", "featured", "archived", "draft")
# Statuses shown in public listings, rankings and stats
VISIBLE_STATUSES = ("active", "featured")


class Category(BaseModel):
    id: int
    name: str
    description: str | None = None
    icon: str | None = None
    color: str = "#FF6B35"
    is_active: bool = True
    created_at: str


class Project(BaseModel):
    id: int
    name: str
    tagline: str
    description: str
    image_url: str | None = None
    website_url: str | None = None
    github_url: str | None = None
    video_url: str | None = None
    category_id: int | None = None
    category_name: str | None = None
    user_id: str
    upvotes_count: int | None = 0
    comments_count: int | None = 0
    status: str = "active"
    created_at: str | None = None
    updated_at: str | None = None


class Comment(BaseModel):
    id: int
    project_id: int
    user_id: str
    content: str
    parent_id: int | None = None
    thread_depth: int = 0
    likes_count: int = 0
    is_deleted: bool = False
    created_at: str
    updated_at: str


class Collection(BaseModel):
    id: int
    user_id: str
    name: str
    description: str | None = None
    is_public: bool = False
    projects_count: int = 0
    created_at: str
    updated_at: str


class TrendingResult(BaseModel):
    project: Project
    score: float
    age_hours: float
    rank: int


class PlatformStats(BaseModel):
    projects_count: int = 0
    users_count: int = 0
    categories_count: int = 0


class AdminStats(BaseModel):
    """Moderation totals across every status."""

    total_projects: int = 0
    active_projects: int = 0
    featured_projects: int = 0
    archived_projects: int = 0
    draft_projects: int = 0
    total_users: int = 0
    total_upvotes: int = 0
    total_comments: int = 0
