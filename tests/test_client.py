"""IlliniHuntClient tests with mocked httpx responses."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from illinihunt.client import IlliniHuntClient


def _mockResp(data, status: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = data
    resp.raise_for_status = MagicMock()
    return resp


@pytest.fixture
def client():
    with patch("illinihunt.client.httpx.Client") as MockClient:
        mock = MockClient.return_value
        c = IlliniHuntClient("http://localhost:8787/api")
        c._client = mock
        yield c, mock


class TestHealth:
    def test_health(self, client):
        c, mock = client
        mock.get.return_value = _mockResp({"status": "ok"})
        assert c.health() == {"status": "ok"}
        mock.get.assert_called_once_with("/health", params=None)


class TestTrending:
    def test_trending(self, client):
        c, mock = client
        mock.get.return_value = _mockResp({"period": "today", "results": []})
        result = c.trending("today", limit=5)
        assert result["period"] == "today"
        mock.get.assert_called_once_with("/trending", params={"period": "today", "limit": 5})

    def test_trending_defaults(self, client):
        c, mock = client
        mock.get.return_value = _mockResp({"period": "week", "results": []})
        c.trending()
        mock.get.assert_called_once_with("/trending", params={})

    def test_featured(self, client):
        c, mock = client
        mock.get.return_value = _mockResp({"pool_size": 50, "results": []})
        c.featured(3)
        mock.get.assert_called_once_with("/featured", params={"limit": 3})

    def test_periods(self, client):
        c, mock = client
        mock.get.return_value = _mockResp([{"value": "all", "label": "All Time"}])
        assert c.periods()[0]["label"] == "All Time"


class TestProjects:
    def test_listProjects(self, client):
        c, mock = client
        mock.get.return_value = _mockResp({"projects": [], "count": 0, "offset": 0})
        c.listProjects(category=2, search="bot", sort_by="trending")
        mock.get.assert_called_once_with(
            "/projects",
            params={
                "sort_by": "trending", "limit": 20, "offset": 0, "category": 2, "search": "bot",
            },
        )

    def test_createProject(self, client):
        c, mock = client
        mock.post.return_value = _mockResp({"created": True, "project_id": 1})
        c.createProject("Hunt", "Find", "Long", "alice", github_url="https://github.com/a/b")
        mock.post.assert_called_once_with(
            "/projects",
            json={
                "name": "Hunt", "tagline": "Find", "description": "Long", "user_id": "alice",
                "category_id": None, "github_url": "https://github.com/a/b",
            },
        )

    def test_voteAndUnvote(self, client):
        c, mock = client
        mock.post.return_value = _mockResp({"voted": True, "upvotes_count": 1})
        mock.request.return_value = _mockResp({"voted": False, "upvotes_count": 0})

        assert c.vote(4, "bob")["upvotes_count"] == 1
        mock.post.assert_called_once_with("/projects/4/vote", json={"user_id": "bob"})

        assert c.unvote(4, "bob")["upvotes_count"] == 0
        mock.request.assert_called_once_with(
            "DELETE", "/projects/4/vote", json={"user_id": "bob"}
        )

    def test_archiveProject(self, client):
        c, mock = client
        mock.request.return_value = _mockResp({"archived": True, "project_id": 4})
        c.archiveProject(4)
        mock.request.assert_called_once_with("DELETE", "/projects/4", json=None)

    def test_bookmark(self, client):
        c, mock = client
        mock.post.return_value = _mockResp({"bookmarked": True, "changed": True})
        mock.request.return_value = _mockResp({"bookmarked": False, "changed": True})
        assert c.bookmark(4, "bob")["bookmarked"] is True
        mock.post.assert_called_once_with("/projects/4/bookmark", json={"user_id": "bob"})
        c.unbookmark(4, "bob")
        mock.request.assert_called_once_with(
            "DELETE", "/projects/4/bookmark", json={"user_id": "bob"}
        )


class TestComments:
    def test_addComment(self, client):
        c, mock = client
        mock.post.return_value = _mockResp({"created": True})
        c.addComment(3, "bob", "Nice", parent_id=9)
        mock.post.assert_called_once_with(
            "/projects/3/comments", json={"user_id": "bob", "content": "Nice", "parent_id": 9}
        )

    def test_listComments_forUser(self, client):
        c, mock = client
        mock.get.return_value = _mockResp({"comments": [], "count": 0})
        c.listComments(3, user_id="carol")
        mock.get.assert_called_once_with("/projects/3/comments", params={"user_id": "carol"})

    def test_likeUnlike(self, client):
        c, mock = client
        mock.post.return_value = _mockResp({"liked": True, "likes_count": 1})
        mock.request.return_value = _mockResp({"liked": False, "likes_count": 0})
        assert c.likeComment(9, "carol")["likes_count"] == 1
        mock.post.assert_called_once_with("/comments/9/like", json={"user_id": "carol"})
        assert c.unlikeComment(9, "carol")["likes_count"] == 0
        mock.request.assert_called_once_with(
            "DELETE", "/comments/9/like", json={"user_id": "carol"}
        )


class TestCollections:
    def test_createCollection(self, client):
        c, mock = client
        mock.post.return_value = _mockResp({"created": True, "collection": {"id": 1}})
        c.createCollection("bob", "Picks", is_public=True)
        mock.post.assert_called_once_with(
            "/collections",
            json={"user_id": "bob", "name": "Picks", "description": None, "is_public": True},
        )

    def test_updateCollection(self, client):
        c, mock = client
        mock.patch.return_value = _mockResp({"updated": True})
        c.updateCollection(1, "bob", name="Demo day")
        mock.patch.assert_called_once_with(
            "/collections/1", json={"user_id": "bob", "name": "Demo day"}
        )

    def test_addAndRemoveProject(self, client):
        c, mock = client
        mock.post.return_value = _mockResp({"added": True, "projects_count": 1})
        mock.request.return_value = _mockResp({"removed": True, "projects_count": 0})
        c.addToCollection(1, 4, "bob")
        mock.post.assert_called_once_with(
            "/collections/1/projects", json={"user_id": "bob", "project_id": 4}
        )
        c.removeFromCollection(1, 4, "bob")
        mock.request.assert_called_once_with(
            "DELETE", "/collections/1/projects/4", json={"user_id": "bob"}
        )

    def test_getCollection_viewer(self, client):
        c, mock = client
        mock.get.return_value = _mockResp({"id": 1, "projects": []})
        c.getCollection(1, viewer_id="bob")
        mock.get.assert_called_once_with("/collections/1", params={"viewer_id": "bob"})


class TestAdmin:
    def test_setProjectStatus(self, client):
        c, mock = client
        mock.patch.return_value = _mockResp({"updated": True, "status": "featured"})
        assert c.setProjectStatus(4, "featured")["status"] == "featured"
        mock.patch.assert_called_once_with("/projects/4/status", json={"status": "featured"})

    def test_adminProjects(self, client):
        c, mock = client
        mock.get.return_value = _mockResp({"projects": [], "count": 0})
        c.adminProjects(status="draft")
        mock.get.assert_called_once_with(
            "/admin/projects", params={"limit": 50, "offset": 0, "status": "draft"}
        )

    def test_deleteProject(self, client):
        c, mock = client
        mock.request.return_value = _mockResp({"deleted": True, "project_id": 4})
        c.deleteProject(4)
        mock.request.assert_called_once_with("DELETE", "/admin/projects/4", json=None)


class TestLifecycle:
    def test_contextManagerCloses(self, client):
        c, mock = client
        with c:
            pass
        mock.close.assert_called_once()
