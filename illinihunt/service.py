"""Service layer: business logic shared by the HTTP API and CLI."""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime

from illinihunt.db import (
    addBookmark,
    addToCollection,
    addVote,
    adminStats,
    bookmarkedProjectIds,
    deleteCollection,
    deleteProject,
    getCategory,
    getCollection,
    getComment,
    getProject,
    insertCategory,
    insertCollection,
    insertComment,
    insertProject,
    likeComment,
    likedCommentIds,
    listAllProjects,
    listBookmarks,
    listCategories,
    listCollectionProjects,
    listComments,
    listProjects,
    listPublicCollections,
    listRecentProjects,
    listUserCollections,
    platformStats,
    removeBookmark,
    removeFromCollection,
    removeVote,
    softDeleteComment,
    unlikeComment,
    updateCollection,
    updateProjectStatus,
    votedProjectIds,
)
from illinihunt.models import (
    PROJECT_STATUSES,
    AdminStats,
    Category,
    Collection,
    Comment,
    PlatformStats,
    Project,
    TrendingResult,
)
from illinihunt.ranking import (
    FEATURED_PROJECTS_COUNT,
    InvalidTimestampError,
    ScoredItem,
    TrendingPeriod,
    periodLabel,
    scoreItems,
    trendingPoolSize,
)
from illinihunt.state import AppState

logger = logging.getLogger("illinihunt")

SORT_OPTIONS = ("recent", "popular", "featured", "trending")


def _projects(rows: list[sqlite3.Row]) -> list[Project]:
    return [Project(**dict(row)) for row in rows]


def _rankedPayload(
    state: AppState,
    scored: list[ScoredItem[Project]],
    user_id: str | None,
) -> list[dict]:
    voted: set[int] = set()
    bookmarked: set[int] = set()
    if user_id:
        ids = [s.item.id for s in scored]
        voted = votedProjectIds(state.db, user_id, ids)
        bookmarked = bookmarkedProjectIds(state.db, user_id, ids)
    results = []
    for rank, s in enumerate(scored, 1):
        entry = TrendingResult(
            project=s.item, score=s.score, age_hours=s.age_hours, rank=rank
        ).model_dump()
        if user_id:
            entry["has_voted"] = s.item.id in voted
            entry["is_bookmarked"] = s.item.id in bookmarked
        results.append(entry)
    return results


def _projectNotFound() -> dict:
    return {"error": "Project not found"}


# ── Trending ─────────────────────────────────────────────────


def svcPeriods() -> list[dict]:
    """All trending periods with display labels."""
    return [{"value": p.value, "label": periodLabel(p)} for p in TrendingPeriod]


async def svcTrending(
    state: AppState,
    period: TrendingPeriod | str | None = None,
    limit: int | None = None,
    user_id: str | None = None,
    now: datetime | None = None,
) -> dict:
    """Rank recent projects by trending score within a period window."""
    cfg = state.config.trending
    period = TrendingPeriod(period or cfg.default_period)
    effective_limit = limit or cfg.default_limit
    pool_size = max(cfg.candidate_limit, trendingPoolSize(effective_limit))

    candidates = _projects(listRecentProjects(state.db, pool_size))
    try:
        scored = scoreItems(candidates, period, now)
    except InvalidTimestampError as e:
        logger.warning("Trending ranking failed: %s", e)
        return {"error": str(e)}

    logger.info(
        "Trending %s: %d of %d candidates in window", period.value, len(scored), len(candidates)
    )
    return {
        "period": period.value,
        "label": periodLabel(period),
        "results": _rankedPayload(state, scored[:effective_limit], user_id),
        "count": min(len(scored), effective_limit),
    }


async def svcFeatured(
    state: AppState,
    limit: int = FEATURED_PROJECTS_COUNT,
    now: datetime | None = None,
) -> dict:
    """Top `limit` projects over a pool of trendingPoolSize(limit) recent ones."""
    pool = _projects(listRecentProjects(state.db, trendingPoolSize(limit)))
    try:
        scored = scoreItems(pool, TrendingPeriod.ALL, now)
    except InvalidTimestampError as e:
        logger.warning("Featured selection failed: %s", e)
        return {"error": str(e)}
    return {
        "pool_size": len(pool),
        "results": _rankedPayload(state, scored[:limit], None),
    }


# ── Projects ─────────────────────────────────────────────────


async def svcListProjects(
    state: AppState,
    category_id: int | None = None,
    search: str | None = None,
    sort_by: str = "recent",
    limit: int = 20,
    offset: int = 0,
    now: datetime | None = None,
) -> dict:
    """Browse projects with optional category/search filters."""
    if sort_by not in SORT_OPTIONS:
        return {"error": f"Invalid sort_by {sort_by!r}; choose one of {', '.join(SORT_OPTIONS)}"}

    if sort_by == "trending":
        rows = listProjects(
            state.db,
            category_id=category_id,
            search=search,
            limit=trendingPoolSize(limit + offset),
        )
        try:
            scored = scoreItems(_projects(rows), TrendingPeriod.ALL, now)
        except InvalidTimestampError as e:
            return {"error": str(e)}
        projects = [s.item for s in scored[offset : offset + limit]]
    else:
        rows = listProjects(
            state.db,
            category_id=category_id,
            search=search,
            sort_by=sort_by,
            limit=limit,
            offset=offset,
        )
        projects = _projects(rows)

    return {
        "projects": [p.model_dump() for p in projects],
        "count": len(projects),
        "offset": offset,
    }


async def svcGetProject(state: AppState, project_id: int) -> dict:
    """Fetch a single project by ID."""
    row = getProject(state.db, project_id)
    if not row:
        return _projectNotFound()
    return Project(**dict(row)).model_dump()


async def svcCreateProject(
    state: AppState,
    name: str,
    tagline: str,
    description: str,
    user_id: str,
    category_id: int | None = None,
    image_url: str | None = None,
    website_url: str | None = None,
    github_url: str | None = None,
    video_url: str | None = None,
    status: str = "active",
) -> dict:
    """Submit a project."""
    if status not in PROJECT_STATUSES:
        return {"error": f"Invalid status {status!r}"}
    if category_id is not None and not getCategory(state.db, category_id):
        return {"error": f"Category {category_id} not found"}

    project_id = insertProject(
        state.db,
        name=name,
        tagline=tagline,
        description=description,
        user_id=user_id,
        category_id=category_id,
        image_url=image_url,
        website_url=website_url,
        github_url=github_url,
        video_url=video_url,
        status=status,
    )
    logger.info("Project %d submitted by %s", project_id, user_id)
    return {"created": True, "project_id": project_id}


async def svcArchiveProject(state: AppState, project_id: int) -> dict:
    """Hide a project from listings without deleting its votes/comments."""
    archived = updateProjectStatus(state.db, project_id, "archived")
    return {"archived": archived, "project_id": project_id}


# ── Moderation ───────────────────────────────────────────────


async def svcSetProjectStatus(state: AppState, project_id: int, status: str) -> dict:
    """Feature, restore, archive or draft a project."""
    if status not in PROJECT_STATUSES:
        return {"error": f"Invalid status {status!r}; choose one of {', '.join(PROJECT_STATUSES)}"}
    if not updateProjectStatus(state.db, project_id, status):
        return _projectNotFound()
    logger.info("Project %d status set to %s", project_id, status)
    return {"updated": True, "project_id": project_id, "status": status}


async def svcAdminListProjects(
    state: AppState,
    status: str | None = None,
    search: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> dict:
    """Every project regardless of status, optionally filtered to one status."""
    if status is not None and status not in PROJECT_STATUSES:
        return {"error": f"Invalid status {status!r}; choose one of {', '.join(PROJECT_STATUSES)}"}
    projects = _projects(listAllProjects(state.db, status, search, limit, offset))
    return {
        "projects": [p.model_dump() for p in projects],
        "count": len(projects),
        "offset": offset,
    }


async def svcAdminStats(state: AppState) -> dict:
    return AdminStats(**adminStats(state.db)).model_dump()


async def svcDeleteProject(state: AppState, project_id: int) -> dict:
    """Permanently remove a project and everything attached to it."""
    if not deleteProject(state.db, project_id):
        return _projectNotFound()
    logger.info("Project %d deleted", project_id)
    return {"deleted": True, "project_id": project_id}


# ── Votes ────────────────────────────────────────────────────


async def svcVote(state: AppState, project_id: int, user_id: str) -> dict:
    """Upvote a visible project (idempotent per user)."""
    if not getProject(state.db, project_id, visible_only=True):
        return _projectNotFound()
    added = addVote(state.db, user_id, project_id)
    row = getProject(state.db, project_id)
    return {"voted": True, "changed": added, "upvotes_count": row["upvotes_count"]}


async def svcUnvote(state: AppState, project_id: int, user_id: str) -> dict:
    """Retract an upvote. Allowed on hidden projects too."""
    if not getProject(state.db, project_id):
        return _projectNotFound()
    removed = removeVote(state.db, user_id, project_id)
    row = getProject(state.db, project_id)
    return {"voted": False, "changed": removed, "upvotes_count": row["upvotes_count"]}


# ── Comments ─────────────────────────────────────────────────


async def svcListComments(
    state: AppState, project_id: int, user_id: str | None = None
) -> dict:
    """Live comments on a project, oldest first. `has_liked` is added for user_id."""
    rows = listComments(state.db, project_id)
    comments = [Comment(**dict(r)).model_dump() for r in rows]
    if user_id:
        liked = likedCommentIds(state.db, user_id, [c["id"] for c in comments])
        for c in comments:
            c["has_liked"] = c["id"] in liked
    return {"project_id": project_id, "comments": comments, "count": len(comments)}


async def svcAddComment(
    state: AppState,
    project_id: int,
    user_id: str,
    content: str,
    parent_id: int | None = None,
) -> dict:
    """Comment on a visible project, optionally as a reply."""
    if not getProject(state.db, project_id, visible_only=True):
        return _projectNotFound()
    if parent_id is not None:
        parent = getComment(state.db, parent_id)
        if not parent or parent["project_id"] != project_id:
            return {"error": f"Parent comment {parent_id} not found on this project"}
    comment_id = insertComment(state.db, project_id, user_id, content, parent_id)
    row = getComment(state.db, comment_id)
    return {"created": True, "comment": Comment(**dict(row)).model_dump()}


async def svcDeleteComment(state: AppState, comment_id: int) -> dict:
    """Soft-delete a comment."""
    deleted = softDeleteComment(state.db, comment_id)
    return {"deleted": deleted, "comment_id": comment_id}


async def svcLikeComment(state: AppState, comment_id: int, user_id: str) -> dict:
    """Like a live comment (idempotent per user)."""
    row = getComment(state.db, comment_id)
    if not row or row["is_deleted"]:
        return {"error": f"Comment {comment_id} not found"}
    added = likeComment(state.db, user_id, comment_id)
    row = getComment(state.db, comment_id)
    return {"liked": True, "changed": added, "likes_count": row["likes_count"]}


async def svcUnlikeComment(state: AppState, comment_id: int, user_id: str) -> dict:
    if not getComment(state.db, comment_id):
        return {"error": f"Comment {comment_id} not found"}
    removed = unlikeComment(state.db, user_id, comment_id)
    row = getComment(state.db, comment_id)
    return {"liked": False, "changed": removed, "likes_count": row["likes_count"]}


# ── Bookmarks ────────────────────────────────────────────────


async def svcBookmark(state: AppState, project_id: int, user_id: str) -> dict:
    if not getProject(state.db, project_id, visible_only=True):
        return _projectNotFound()
    added = addBookmark(state.db, user_id, project_id)
    return {"bookmarked": True, "changed": added, "project_id": project_id}


async def svcUnbookmark(state: AppState, project_id: int, user_id: str) -> dict:
    removed = removeBookmark(state.db, user_id, project_id)
    return {"bookmarked": False, "changed": removed, "project_id": project_id}


async def svcListBookmarks(state: AppState, user_id: str) -> dict:
    """A user's bookmarked projects, most recently bookmarked first."""
    rows = listBookmarks(state.db, user_id)
    return {
        "user_id": user_id,
        "projects": [
            {**Project(**dict(r)).model_dump(), "bookmarked_at": r["bookmarked_at"]}
            for r in rows
        ],
        "count": len(rows),
    }


# ── Collections ──────────────────────────────────────────────


def _collectionError(row: sqlite3.Row | None, collection_id: int, user_id: str) -> dict | None:
    """Error payload unless user_id owns the collection."""
    if not row:
        return {"error": f"Collection {collection_id} not found"}
    if row["user_id"] != user_id:
        return {"error": f"Collection {collection_id} is not owned by {user_id}"}
    return None


def _visibleTo(row: sqlite3.Row, viewer_id: str | None) -> bool:
    return bool(row["is_public"]) or row["user_id"] == viewer_id


async def svcCreateCollection(
    state: AppState,
    user_id: str,
    name: str,
    description: str | None = None,
    is_public: bool = False,
) -> dict:
    collection_id = insertCollection(state.db, user_id, name, description, is_public)
    row = getCollection(state.db, collection_id)
    return {"created": True, "collection": Collection(**dict(row)).model_dump()}


async def svcGetCollection(
    state: AppState, collection_id: int, viewer_id: str | None = None
) -> dict:
    """A collection with its projects. Private ones are only visible to their owner."""
    row = getCollection(state.db, collection_id)
    if not row or not _visibleTo(row, viewer_id):
        return {"error": f"Collection {collection_id} not found"}
    projects = _projects(listCollectionProjects(state.db, collection_id))
    return {
        **Collection(**dict(row)).model_dump(),
        "projects": [p.model_dump() for p in projects],
    }


async def svcListUserCollections(
    state: AppState, user_id: str, viewer_id: str | None = None
) -> dict:
    """A user's collections; private ones only when the owner is asking."""
    rows = [r for r in listUserCollections(state.db, user_id) if _visibleTo(r, viewer_id)]
    return {
        "user_id": user_id,
        "collections": [Collection(**dict(r)).model_dump() for r in rows],
        "count": len(rows),
    }


async def svcPublicCollections(state: AppState, limit: int = 20, offset: int = 0) -> dict:
    rows = listPublicCollections(state.db, limit, offset)
    return {
        "collections": [Collection(**dict(r)).model_dump() for r in rows],
        "count": len(rows),
        "offset": offset,
    }


async def svcUpdateCollection(
    state: AppState,
    collection_id: int,
    user_id: str,
    name: str | None = None,
    description: str | None = None,
    is_public: bool | None = None,
) -> dict:
    err = _collectionError(getCollection(state.db, collection_id), collection_id, user_id)
    if err:
        return err
    updateCollection(state.db, collection_id, name, description, is_public)
    row = getCollection(state.db, collection_id)
    return {"updated": True, "collection": Collection(**dict(row)).model_dump()}


async def svcDeleteCollection(state: AppState, collection_id: int, user_id: str) -> dict:
    err = _collectionError(getCollection(state.db, collection_id), collection_id, user_id)
    if err:
        return err
    deleteCollection(state.db, collection_id)
    return {"deleted": True, "collection_id": collection_id}


async def svcAddToCollection(
    state: AppState, collection_id: int, project_id: int, user_id: str
) -> dict:
    """Add a visible project to a collection the user owns."""
    err = _collectionError(getCollection(state.db, collection_id), collection_id, user_id)
    if err:
        return err
    if not getProject(state.db, project_id, visible_only=True):
        return _projectNotFound()
    added = addToCollection(state.db, collection_id, project_id)
    row = getCollection(state.db, collection_id)
    return {"added": added, "collection_id": collection_id, "projects_count": row["projects_count"]}


async def svcRemoveFromCollection(
    state: AppState, collection_id: int, project_id: int, user_id: str
) -> dict:
    err = _collectionError(getCollection(state.db, collection_id), collection_id, user_id)
    if err:
        return err
    removed = removeFromCollection(state.db, collection_id, project_id)
    row = getCollection(state.db, collection_id)
    return {
        "removed": removed,
        "collection_id": collection_id,
        "projects_count": row["projects_count"],
    }


# ── Categories & stats ───────────────────────────────────────


async def svcListCategories(state: AppState) -> dict:
    rows = listCategories(state.db)
    return {"categories": [Category(**dict(r)).model_dump() for r in rows]}


async def svcCreateCategory(
    state: AppState,
    name: str,
    description: str | None = None,
    icon: str | None = None,
    color: str = "#FF6B35",
) -> dict:
    try:
        category_id = insertCategory(state.db, name, description, icon, color)
    except sqlite3.IntegrityError:
        return {"error": f"Category '{name}' already exists"}
    return {"created": True, "category_id": category_id}


async def svcStats(state: AppState) -> dict:
    """Platform statistics."""
    return PlatformStats(**platformStats(state.db)).model_dump()


async def svcRecentActivity(state: AppState, limit: int = 5) -> dict:
    """Newest visible projects."""
    projects = _projects(listRecentProjects(state.db, limit))
    return {
        "projects": [
            {
                "id": p.id,
                "name": p.name,
                "tagline": p.tagline,
                "category_name": p.category_name,
                "created_at": p.created_at,
            }
            for p in projects
        ]
    }
