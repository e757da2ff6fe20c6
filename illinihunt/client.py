"""Sync HTTP client for the IlliniHunt API."""

from __future__ import annotations

from typing import Any

import httpx

DEFAULT_PORT = 8787


class IlliniHuntClient:
    """Sync httpx client wrapping the IlliniHunt HTTP API."""

    def __init__(self, base_url: str | None = None, timeout: float = 30.0):
        url = base_url or f"http://localhost:{DEFAULT_PORT}/api"
        self._client = httpx.Client(base_url=url, timeout=timeout)

    # ── lifecycle ─────────────────────────────────────────────

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> IlliniHuntClient:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # ── helpers ───────────────────────────────────────────────

    def _post(self, path: str, **kwargs: Any) -> dict:
        r = self._client.post(path, json=kwargs)
        r.raise_for_status()
        return r.json()

    def _get(self, path: str, params: dict | None = None) -> Any:
        r = self._client.get(path, params=params)
        r.raise_for_status()
        return r.json()

    def _delete(self, path: str, **kwargs: Any) -> dict:
        r = self._client.request("DELETE", path, json=kwargs or None)
        r.raise_for_status()
        return r.json()

    def _patch(self, path: str, **kwargs: Any) -> dict:
        r = self._client.patch(path, json=kwargs)
        r.raise_for_status()
        return r.json()

    # ── health ────────────────────────────────────────────────

    def health(self) -> dict:
        return self._get("/health")

    # ── trending ──────────────────────────────────────────────

    def periods(self) -> list[dict]:
        return self._get("/periods")

    def trending(
        self,
        period: str | None = None,
        limit: int | None = None,
        user_id: str | None = None,
    ) -> dict:
        params: dict[str, Any] = {}
        if period:
            params["period"] = period
        if limit:
            params["limit"] = limit
        if user_id:
            params["user_id"] = user_id
        return self._get("/trending", params=params)

    def featured(self, limit: int | None = None) -> dict:
        return self._get("/featured", params={"limit": limit} if limit else None)

    # ── projects ──────────────────────────────────────────────

    def listProjects(
        self,
        category: int | None = None,
        search: str | None = None,
        sort_by: str = "recent",
        limit: int = 20,
        offset: int = 0,
    ) -> dict:
        params: dict[str, Any] = {"sort_by": sort_by, "limit": limit, "offset": offset}
        if category is not None:
            params["category"] = category
        if search:
            params["search"] = search
        return self._get("/projects", params=params)

    def getProject(self, project_id: int) -> dict:
        return self._get(f"/projects/{project_id}")

    def createProject(
        self,
        name: str,
        tagline: str,
        description: str,
        user_id: str,
        category_id: int | None = None,
        **links: str | None,
    ) -> dict:
        return self._post(
            "/projects",
            name=name,
            tagline=tagline,
            description=description,
            user_id=user_id,
            category_id=category_id,
            **links,
        )

    def archiveProject(self, project_id: int) -> dict:
        return self._delete(f"/projects/{project_id}")

    def vote(self, project_id: int, user_id: str) -> dict:
        return self._post(f"/projects/{project_id}/vote", user_id=user_id)

    def unvote(self, project_id: int, user_id: str) -> dict:
        return self._delete(f"/projects/{project_id}/vote", user_id=user_id)

    def bookmark(self, project_id: int, user_id: str) -> dict:
        return self._post(f"/projects/{project_id}/bookmark", user_id=user_id)

    def unbookmark(self, project_id: int, user_id: str) -> dict:
        return self._delete(f"/projects/{project_id}/bookmark", user_id=user_id)

    # ── comments ──────────────────────────────────────────────

    def listComments(self, project_id: int, user_id: str | None = None) -> dict:
        params = {"user_id": user_id} if user_id else None
        return self._get(f"/projects/{project_id}/comments", params=params)

    def addComment(
        self, project_id: int, user_id: str, content: str, parent_id: int | None = None
    ) -> dict:
        return self._post(
            f"/projects/{project_id}/comments",
            user_id=user_id, content=content, parent_id=parent_id,
        )

    def deleteComment(self, comment_id: int) -> dict:
        return self._delete(f"/comments/{comment_id}")

    def likeComment(self, comment_id: int, user_id: str) -> dict:
        return self._post(f"/comments/{comment_id}/like", user_id=user_id)

    def unlikeComment(self, comment_id: int, user_id: str) -> dict:
        return self._delete(f"/comments/{comment_id}/like", user_id=user_id)

    # ── bookmarks & collections ───────────────────────────────

    def listBookmarks(self, user_id: str) -> dict:
        return self._get(f"/users/{user_id}/bookmarks")

    def userCollections(self, user_id: str, viewer_id: str | None = None) -> dict:
        params = {"viewer_id": viewer_id} if viewer_id else None
        return self._get(f"/users/{user_id}/collections", params=params)

    def publicCollections(self, limit: int = 20, offset: int = 0) -> dict:
        return self._get("/collections", params={"limit": limit, "offset": offset})

    def createCollection(
        self,
        user_id: str,
        name: str,
        description: str | None = None,
        is_public: bool = False,
    ) -> dict:
        return self._post(
            "/collections",
            user_id=user_id, name=name, description=description, is_public=is_public,
        )

    def getCollection(self, collection_id: int, viewer_id: str | None = None) -> dict:
        params = {"viewer_id": viewer_id} if viewer_id else None
        return self._get(f"/collections/{collection_id}", params=params)

    def updateCollection(self, collection_id: int, user_id: str, **fields: Any) -> dict:
        return self._patch(f"/collections/{collection_id}", user_id=user_id, **fields)

    def deleteCollection(self, collection_id: int, user_id: str) -> dict:
        return self._delete(f"/collections/{collection_id}", user_id=user_id)

    def addToCollection(self, collection_id: int, project_id: int, user_id: str) -> dict:
        return self._post(
            f"/collections/{collection_id}/projects", user_id=user_id, project_id=project_id
        )

    def removeFromCollection(self, collection_id: int, project_id: int, user_id: str) -> dict:
        return self._delete(
            f"/collections/{collection_id}/projects/{project_id}", user_id=user_id
        )

    # ── admin ─────────────────────────────────────────────────

    def setProjectStatus(self, project_id: int, status: str) -> dict:
        return self._patch(f"/projects/{project_id}/status", status=status)

    def adminProjects(
        self,
        status: str | None = None,
        search: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> dict:
        params: dict[str, Any] = {"limit": limit, "offset": offset}
        if status:
            params["status"] = status
        if search:
            params["search"] = search
        return self._get("/admin/projects", params=params)

    def adminStats(self) -> dict:
        return self._get("/admin/stats")

    def deleteProject(self, project_id: int) -> dict:
        return self._delete(f"/admin/projects/{project_id}")

    # ── categories & stats ────────────────────────────────────

    def listCategories(self) -> dict:
        return self._get("/categories")

    def createCategory(
        self, name: str, description: str | None = None, icon: str | None = None
    ) -> dict:
        return self._post("/categories", name=name, description=description, icon=icon)

    def stats(self) -> dict:
        return self._get("/stats")

    def activity(self, limit: int = 5) -> dict:
        return self._get("/activity", params={"limit": limit})
