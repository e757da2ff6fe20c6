"""FastAPI HTTP API: routes calling the shared service layer."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query

from illinihunt.ranking import FEATURED_PROJECTS_COUNT, TrendingPeriod
from illinihunt.server.api_models import (
    CollectionProjectRequest,
    CreateCategoryRequest,
    CreateCollectionRequest,
    CreateCommentRequest,
    CreateProjectRequest,
    ProjectStatusRequest,
    UpdateCollectionRequest,
    UserRequest,
)
from illinihunt.service import (
    svcAddComment,
    svcAddToCollection,
    svcAdminListProjects,
    svcAdminStats,
    svcArchiveProject,
    svcBookmark,
    svcCreateCategory,
    svcCreateCollection,
    svcCreateProject,
    svcDeleteCollection,
    svcDeleteComment,
    svcDeleteProject,
    svcFeatured,
    svcGetCollection,
    svcGetProject,
    svcLikeComment,
    svcListBookmarks,
    svcListCategories,
    svcListComments,
    svcListProjects,
    svcListUserCollections,
    svcPeriods,
    svcPublicCollections,
    svcRecentActivity,
    svcRemoveFromCollection,
    svcSetProjectStatus,
    svcStats,
    svcTrending,
    svcUnbookmark,
    svcUnlikeComment,
    svcUnvote,
    svcUpdateCollection,
    svcVote,
)
from illinihunt.state import getState

router = APIRouter()

# Substring of a service error message -> HTTP status
_ERROR_STATUS = {"not found": 404, "not owned": 403}


def _checked(result: dict, status_code: int = 422) -> dict:
    """Raise HTTPException for service-level {"error": ...} results."""
    if "error" in result:
        message = result["error"].lower()
        code = next((c for text, c in _ERROR_STATUS.items() if text in message), status_code)
        raise HTTPException(status_code=code, detail=result["error"])
    return result


# ── Health ───────────────────────────────────────────────────


@router.get("/health")
async def health():
    return {"status": "ok"}


# ── Trending ─────────────────────────────────────────────────


@router.get("/periods")
async def api_periods():
    return svcPeriods()


@router.get("/trending")
async def api_trending(
    period: TrendingPeriod | None = Query(None),
    limit: int | None = Query(None, ge=1, le=500),
    user_id: str | None = Query(None),
):
    return _checked(await svcTrending(getState(), period, limit, user_id))


@router.get("/featured")
async def api_featured(limit: int = Query(FEATURED_PROJECTS_COUNT, ge=1, le=500)):
    return _checked(await svcFeatured(getState(), limit))


# ── Projects ─────────────────────────────────────────────────


@router.get("/projects")
async def api_list_projects(
    category: int | None = Query(None),
    search: str | None = Query(None),
    sort_by: str = Query("recent"),
    limit: int = Query(20, ge=1, le=500),
    offset: int = Query(0, ge=0),
):
    return _checked(await svcListProjects(getState(), category, search, sort_by, limit, offset))


@router.get("/projects/{project_id}")
async def api_get_project(project_id: int):
    return _checked(await svcGetProject(getState(), project_id))


@router.post("/projects")
async def api_create_project(req: CreateProjectRequest):
    return _checked(await svcCreateProject(getState(), **req.model_dump()))


@router.delete("/projects/{project_id}")
async def api_archive_project(project_id: int):
    return await svcArchiveProject(getState(), project_id)


@router.patch("/projects/{project_id}/status")
async def api_set_project_status(project_id: int, req: ProjectStatusRequest):
    return _checked(await svcSetProjectStatus(getState(), project_id, req.status))


@router.post("/projects/{project_id}/vote")
async def api_vote(project_id: int, req: UserRequest):
    return _checked(await svcVote(getState(), project_id, req.user_id))


@router.delete("/projects/{project_id}/vote")
async def api_unvote(project_id: int, req: UserRequest):
    return _checked(await svcUnvote(getState(), project_id, req.user_id))


@router.post("/projects/{project_id}/bookmark")
async def api_bookmark(project_id: int, req: UserRequest):
    return _checked(await svcBookmark(getState(), project_id, req.user_id))


@router.delete("/projects/{project_id}/bookmark")
async def api_unbookmark(project_id: int, req: UserRequest):
    return await svcUnbookmark(getState(), project_id, req.user_id)


# ── Admin ────────────────────────────────────────────────────


@router.get("/admin/projects")
async def api_admin_projects(
    status: str | None = Query(None),
    search: str | None = Query(None),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
):
    return _checked(await svcAdminListProjects(getState(), status, search, limit, offset))


@router.get("/admin/stats")
async def api_admin_stats():
    return await svcAdminStats(getState())


@router.delete("/admin/projects/{project_id}")
async def api_delete_project(project_id: int):
    return _checked(await svcDeleteProject(getState(), project_id))


# ── Comments ─────────────────────────────────────────────────


@router.get("/projects/{project_id}/comments")
async def api_list_comments(project_id: int, user_id: str | None = Query(None)):
    return await svcListComments(getState(), project_id, user_id)


@router.post("/projects/{project_id}/comments")
async def api_add_comment(project_id: int, req: CreateCommentRequest):
    return _checked(
        await svcAddComment(getState(), project_id, req.user_id, req.content, req.parent_id)
    )


@router.delete("/comments/{comment_id}")
async def api_delete_comment(comment_id: int):
    return await svcDeleteComment(getState(), comment_id)


@router.post("/comments/{comment_id}/like")
async def api_like_comment(comment_id: int, req: UserRequest):
    return _checked(await svcLikeComment(getState(), comment_id, req.user_id))


@router.delete("/comments/{comment_id}/like")
async def api_unlike_comment(comment_id: int, req: UserRequest):
    return _checked(await svcUnlikeComment(getState(), comment_id, req.user_id))


# ── Bookmarks & collections ──────────────────────────────────


@router.get("/users/{user_id}/bookmarks")
async def api_list_bookmarks(user_id: str):
    return await svcListBookmarks(getState(), user_id)


@router.get("/users/{user_id}/collections")
async def api_user_collections(user_id: str, viewer_id: str | None = Query(None)):
    return await svcListUserCollections(getState(), user_id, viewer_id)


@router.get("/collections")
async def api_public_collections(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    return await svcPublicCollections(getState(), limit, offset)


@router.post("/collections")
async def api_create_collection(req: CreateCollectionRequest):
    return await svcCreateCollection(getState(), **req.model_dump())


@router.get("/collections/{collection_id}")
async def api_get_collection(collection_id: int, viewer_id: str | None = Query(None)):
    return _checked(await svcGetCollection(getState(), collection_id, viewer_id))


@router.patch("/collections/{collection_id}")
async def api_update_collection(collection_id: int, req: UpdateCollectionRequest):
    return _checked(await svcUpdateCollection(getState(), collection_id, **req.model_dump()))


@router.delete("/collections/{collection_id}")
async def api_delete_collection(collection_id: int, req: UserRequest):
    return _checked(await svcDeleteCollection(getState(), collection_id, req.user_id))


@router.post("/collections/{collection_id}/projects")
async def api_add_to_collection(collection_id: int, req: CollectionProjectRequest):
    return _checked(
        await svcAddToCollection(getState(), collection_id, req.project_id, req.user_id)
    )


@router.delete("/collections/{collection_id}/projects/{project_id}")
async def api_remove_from_collection(collection_id: int, project_id: int, req: UserRequest):
    return _checked(
        await svcRemoveFromCollection(getState(), collection_id, project_id, req.user_id)
    )


# ── Categories & stats ───────────────────────────────────────


@router.get("/categories")
async def api_list_categories():
    return await svcListCategories(getState())


@router.post("/categories")
async def api_create_category(req: CreateCategoryRequest):
    return _checked(await svcCreateCategory(getState(), **req.model_dump()), status_code=409)


@router.get("/stats")
async def api_stats():
    return await svcStats(getState())


@router.get("/activity")
async def api_activity(limit: int = Query(5, ge=1, le=100)):
    return await svcRecentActivity(getState(), limit)
