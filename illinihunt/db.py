"""SQLite project store: schema setup and CRUD for projects, engagement, and collections."""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from illinihunt.config import IlliniHuntConfig
from illinihunt.models import PROJECT_STATUSES, VISIBLE_STATUSES

SCHEMA_VERSION = 2
MAX_THREAD_DEPTH = 3
logger = logging.getLogger("illinihunt")

_PROJECT_COLUMNS = """p.*, c.name AS category_name"""
_PROJECT_FROM = """projects p LEFT JOIN categories c ON c.id = p.category_id"""


def _placeholders(values) -> str:
    return ",".join("?" for _ in values)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def connect(
    config: IlliniHuntConfig,
    *,
    check_same_thread: bool = True,
) -> sqlite3.Connection:
    """Open DB and create tables."""
    db_path = Path(config.db_path).expanduser()
    db_path.parent.mkdir(parents=True, exist_ok=True)

    db = sqlite3.connect(str(db_path), check_same_thread=check_same_thread)
    db.row_factory = sqlite3.Row
    db.execute("PRAGMA journal_mode=WAL")
    db.execute("PRAGMA foreign_keys=ON")
    db.execute("PRAGMA busy_timeout=5000")

    try:
        _migrate(db)
    except sqlite3.Error:
        logger.exception("Schema setup failed for %s", db_path)
        raise RuntimeError(
            f"Failed to initialise database at {db_path}. "
            "Back up and delete the file to start fresh, or check logs for details."
        ) from None
    return db


def _migrate(db: sqlite3.Connection) -> None:
    """Create tables, counters and indexes if they don't exist."""
    db.executescript("""
        CREATE TABLE IF NOT EXISTS categories (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT UNIQUE NOT NULL,
            description TEXT,
            icon TEXT,
            color TEXT DEFAULT '#FF6B35',
            is_active INTEGER DEFAULT 1,
            created_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS projects (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            tagline TEXT NOT NULL,
            description TEXT NOT NULL,
            image_url TEXT,
            website_url TEXT,
            github_url TEXT,
            video_url TEXT,
            category_id INTEGER REFERENCES categories(id),
            user_id TEXT NOT NULL,
            upvotes_count INTEGER DEFAULT 0,
            comments_count INTEGER DEFAULT 0,
            status TEXT DEFAULT 'active'
                CHECK (status IN ('active', 'featured', 'archived', 'draft')),
            created_at TEXT,
            updated_at TEXT
        );

        CREATE TABLE IF NOT EXISTS votes (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id TEXT NOT NULL,
            project_id INTEGER NOT NULL REFERENCES projects(id) ON DELETE CASCADE,
            created_at TEXT NOT NULL,
            UNIQUE(user_id, project_id)
        );

        CREATE TABLE IF NOT EXISTS comments (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            project_id INTEGER NOT NULL REFERENCES projects(id) ON DELETE CASCADE,
            user_id TEXT NOT NULL,
            content TEXT NOT NULL,
            parent_id INTEGER REFERENCES comments(id) ON DELETE CASCADE,
            thread_depth INTEGER DEFAULT 0,
            likes_count INTEGER DEFAULT 0,
            is_deleted INTEGER DEFAULT 0,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS comment_likes (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id TEXT NOT NULL,
            comment_id INTEGER NOT NULL REFERENCES comments(id) ON DELETE CASCADE,
            created_at TEXT NOT NULL,
            UNIQUE(user_id, comment_id)
        );

        CREATE TABLE IF NOT EXISTS bookmarks (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id TEXT NOT NULL,
            project_id INTEGER NOT NULL REFERENCES projects(id) ON DELETE CASCADE,
            created_at TEXT NOT NULL,
            UNIQUE(user_id, project_id)
        );

        CREATE TABLE IF NOT EXISTS collections (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id TEXT NOT NULL,
            name TEXT NOT NULL,
            description TEXT,
            is_public INTEGER DEFAULT 0,
            projects_count INTEGER DEFAULT 0,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS collection_projects (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            collection_id INTEGER NOT NULL REFERENCES collections(id) ON DELETE CASCADE,
            project_id INTEGER NOT NULL REFERENCES projects(id) ON DELETE CASCADE,
            added_at TEXT NOT NULL,
            UNIQUE(collection_id, project_id)
        );

        -- Counter triggers keep the denormalised *_count columns in sync
        CREATE TRIGGER IF NOT EXISTS votes_ai AFTER INSERT ON votes BEGIN
            UPDATE projects SET upvotes_count = upvotes_count + 1 WHERE id = new.project_id;
        END;

        CREATE TRIGGER IF NOT EXISTS votes_ad AFTER DELETE ON votes BEGIN
            UPDATE projects SET upvotes_count = MAX(upvotes_count - 1, 0)
            WHERE id = old.project_id;
        END;

        CREATE TRIGGER IF NOT EXISTS comments_ai AFTER INSERT ON comments BEGIN
            UPDATE projects SET comments_count = comments_count + 1 WHERE id = new.project_id;
        END;

        CREATE TRIGGER IF NOT EXISTS comments_soft_delete AFTER UPDATE OF is_deleted ON comments
        WHEN old.is_deleted = 0 AND new.is_deleted = 1 BEGIN
            UPDATE projects SET comments_count = MAX(comments_count - 1, 0)
            WHERE id = new.project_id;
        END;

        CREATE INDEX IF NOT EXISTS idx_projects_user ON projects(user_id);
        CREATE INDEX IF NOT EXISTS idx_projects_category ON projects(category_id);
        CREATE INDEX IF NOT EXISTS idx_projects_created ON projects(created_at);
        CREATE INDEX IF NOT EXISTS idx_projects_upvotes ON projects(upvotes_count);
        CREATE INDEX IF NOT EXISTS idx_votes_project ON votes(project_id);
        CREATE INDEX IF NOT EXISTS idx_comments_project ON comments(project_id);

        CREATE TRIGGER IF NOT EXISTS comment_likes_ai AFTER INSERT ON comment_likes BEGIN
            UPDATE comments SET likes_count = likes_count + 1 WHERE id = new.comment_id;
        END;

        CREATE TRIGGER IF NOT EXISTS comment_likes_ad AFTER DELETE ON comment_likes BEGIN
            UPDATE comments SET likes_count = MAX(likes_count - 1, 0) WHERE id = old.comment_id;
        END;

        CREATE TRIGGER IF NOT EXISTS collection_projects_ai AFTER INSERT ON collection_projects
        BEGIN
            UPDATE collections SET projects_count = projects_count + 1
            WHERE id = new.collection_id;
        END;

        CREATE TRIGGER IF NOT EXISTS collection_projects_ad AFTER DELETE ON collection_projects
        BEGIN
            UPDATE collections SET projects_count = MAX(projects_count - 1, 0)
            WHERE id = old.collection_id;
        END;

        CREATE INDEX IF NOT EXISTS idx_comments_parent ON comments(parent_id);
        CREATE INDEX IF NOT EXISTS idx_comment_likes_comment ON comment_likes(comment_id);
        CREATE INDEX IF NOT EXISTS idx_bookmarks_user ON bookmarks(user_id);
        CREATE INDEX IF NOT EXISTS idx_collections_user ON collections(user_id);
        CREATE INDEX IF NOT EXISTS idx_collections_public ON collections(is_public);
        CREATE INDEX IF NOT EXISTS idx_collection_projects_collection
            ON collection_projects(collection_id);
    """)

    db.execute("CREATE TABLE IF NOT EXISTS meta (key TEXT PRIMARY KEY, value TEXT)")
    db.execute(
        "INSERT OR REPLACE INTO meta (key, value) VALUES ('schema_version', ?)",
        (str(SCHEMA_VERSION),),
    )
    db.commit()


# -- Categories --


def insertCategory(
    db: sqlite3.Connection,
    name: str,
    description: str | None = None,
    icon: str | None = None,
    color: str = "#FF6B35",
) -> int:
    """Insert a category. Returns category ID."""
    cursor = db.execute(
        """INSERT INTO categories (name, description, icon, color, created_at)
           VALUES (?, ?, ?, ?, ?)""",
        (name, description, icon, color, _now()),
    )
    db.commit()
    assert cursor.lastrowid is not None
    return cursor.lastrowid


def getCategory(db: sqlite3.Connection, category_id: int) -> sqlite3.Row | None:
    return db.execute("SELECT * FROM categories WHERE id = ?", (category_id,)).fetchone()


def listCategories(db: sqlite3.Connection, active_only: bool = True) -> list[sqlite3.Row]:
    where = "WHERE is_active = 1" if active_only else ""
    return db.execute(f"SELECT * FROM categories {where} ORDER BY name").fetchall()


# -- Projects --


def insertProject(
    db: sqlite3.Connection,
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
    created_at: str | None = None,
) -> int:
    """Insert a project. created_at defaults to now. Returns project ID."""
    now = _now()
    cursor = db.execute(
        """INSERT INTO projects (name, tagline, description, image_url, website_url,
           github_url, video_url, category_id, user_id, status, created_at, updated_at)
           VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
        (
            name,
            tagline,
            description,
            image_url,
            website_url,
            github_url,
            video_url,
            category_id,
            user_id,
            status,
            created_at or now,
            now,
        ),
    )
    db.commit()
    assert cursor.lastrowid is not None
    return cursor.lastrowid


def getProject(
    db: sqlite3.Connection, project_id: int, visible_only: bool = False
) -> sqlite3.Row | None:
    """Fetch a single project (with its category name) by ID.

    With visible_only, archived and draft projects are treated as missing.
    """
    sql = f"SELECT {_PROJECT_COLUMNS} FROM {_PROJECT_FROM} WHERE p.id = ?"
    params: list[str | int] = [project_id]
    if visible_only:
        sql += f" AND p.status IN ({_placeholders(VISIBLE_STATUSES)})"
        params.extend(VISIBLE_STATUSES)
    return db.execute(sql, params).fetchone()


def listProjects(
    db: sqlite3.Connection,
    category_id: int | None = None,
    search: str | None = None,
    sort_by: str = "recent",
    limit: int = 20,
    offset: int = 0,
    statuses: tuple[str, ...] = VISIBLE_STATUSES,
) -> list[sqlite3.Row]:
    """Browse projects in the given statuses. sort_by: recent | popular | featured."""
    conditions = [f"p.status IN ({_placeholders(statuses)})"]
    params: list[str | int] = list(statuses)
    if category_id is not None:
        conditions.append("p.category_id = ?")
        params.append(category_id)
    if search:
        conditions.append("(p.name LIKE ? OR p.tagline LIKE ?)")
        params.extend([f"%{search}%", f"%{search}%"])
    if sort_by == "featured":
        conditions.append("p.status = 'featured'")
    order = "p.upvotes_count DESC, p.created_at DESC" if sort_by == "popular" else "p.created_at DESC"
    where = " AND ".join(conditions)
    params.extend([limit, offset])
    return db.execute(
        f"""SELECT {_PROJECT_COLUMNS} FROM {_PROJECT_FROM}
            WHERE {where} ORDER BY {order}, p.id DESC LIMIT ? OFFSET ?""",
        params,
    ).fetchall()


def listAllProjects(
    db: sqlite3.Connection,
    status: str | None = None,
    search: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[sqlite3.Row]:
    """Moderation listing: every status, or only `status`, newest first."""
    statuses = (status,) if status else PROJECT_STATUSES
    return listProjects(db, search=search, limit=limit, offset=offset, statuses=statuses)


def listRecentProjects(db: sqlite3.Connection, limit: int) -> list[sqlite3.Row]:
    """Most recently created visible projects: the candidate pool for trending."""
    return listProjects(db, sort_by="recent", limit=limit)


def updateProjectStatus(db: sqlite3.Connection, project_id: int, status: str) -> bool:
    """Set project status. Returns True if found."""
    cursor = db.execute(
        "UPDATE projects SET status = ?, updated_at = ? WHERE id = ?",
        (status, _now(), project_id),
    )
    db.commit()
    return cursor.rowcount > 0


def deleteProject(db: sqlite3.Connection, project_id: int) -> bool:
    """Hard-delete a project; votes, comments, bookmarks and memberships cascade."""
    cursor = db.execute("DELETE FROM projects WHERE id = ?", (project_id,))
    db.commit()
    return cursor.rowcount > 0


# -- Votes --


def addVote(db: sqlite3.Connection, user_id: str, project_id: int) -> bool:
    """Upvote a project. Returns False if the user already voted."""
    cursor = db.execute(
        "INSERT OR IGNORE INTO votes (user_id, project_id, created_at) VALUES (?, ?, ?)",
        (user_id, project_id, _now()),
    )
    db.commit()
    return cursor.rowcount > 0


def removeVote(db: sqlite3.Connection, user_id: str, project_id: int) -> bool:
    """Retract an upvote. Returns True if one existed."""
    cursor = db.execute(
        "DELETE FROM votes WHERE user_id = ? AND project_id = ?", (user_id, project_id)
    )
    db.commit()
    return cursor.rowcount > 0


def hasVoted(db: sqlite3.Connection, user_id: str, project_id: int) -> bool:
    row = db.execute(
        "SELECT 1 FROM votes WHERE user_id = ? AND project_id = ?", (user_id, project_id)
    ).fetchone()
    return row is not None


def _userMarks(
    db: sqlite3.Connection, table: str, column: str, user_id: str, ids: list[int]
) -> set[int]:
    """Which of ids the user has a row for in table (votes, likes, bookmarks)."""
    if not ids:
        return set()
    rows = db.execute(
        f"SELECT {column} FROM {table} WHERE user_id = ? AND {column} IN ({_placeholders(ids)})",
        [user_id, *ids],
    ).fetchall()
    return {row[column] for row in rows}


def votedProjectIds(db: sqlite3.Connection, user_id: str, project_ids: list[int]) -> set[int]:
    """Which of project_ids the user has upvoted."""
    return _userMarks(db, "votes", "project_id", user_id, project_ids)


# -- Comments --


def insertComment(
    db: sqlite3.Connection,
    project_id: int,
    user_id: str,
    content: str,
    parent_id: int | None = None,
) -> int:
    """Add a comment. Replies nest at most MAX_THREAD_DEPTH levels. Returns comment ID."""
    thread_depth = 0
    if parent_id is not None:
        parent = db.execute(
            "SELECT thread_depth FROM comments WHERE id = ?", (parent_id,)
        ).fetchone()
        if parent:
            thread_depth = min(parent["thread_depth"] + 1, MAX_THREAD_DEPTH)
    now = _now()
    cursor = db.execute(
        """INSERT INTO comments (project_id, user_id, content, parent_id, thread_depth,
           created_at, updated_at)
           VALUES (?, ?, ?, ?, ?, ?, ?)""",
        (project_id, user_id, content, parent_id, thread_depth, now, now),
    )
    db.commit()
    assert cursor.lastrowid is not None
    return cursor.lastrowid


def getComment(db: sqlite3.Connection, comment_id: int) -> sqlite3.Row | None:
    return db.execute("SELECT * FROM comments WHERE id = ?", (comment_id,)).fetchone()


def listComments(db: sqlite3.Connection, project_id: int) -> list[sqlite3.Row]:
    """Non-deleted comments on a project, oldest first."""
    return db.execute(
        """SELECT * FROM comments WHERE project_id = ? AND is_deleted = 0
           ORDER BY created_at ASC, id ASC""",
        (project_id,),
    ).fetchall()


def softDeleteComment(db: sqlite3.Connection, comment_id: int) -> bool:
    """Soft-delete a comment. Returns True if it was live."""
    cursor = db.execute(
        "UPDATE comments SET is_deleted = 1, updated_at = ? WHERE id = ? AND is_deleted = 0",
        (_now(), comment_id),
    )
    db.commit()
    return cursor.rowcount > 0


# -- Comment likes --


def likeComment(db: sqlite3.Connection, user_id: str, comment_id: int) -> bool:
    """Like a comment. Returns False if the user already liked it."""
    cursor = db.execute(
        "INSERT OR IGNORE INTO comment_likes (user_id, comment_id, created_at) VALUES (?, ?, ?)",
        (user_id, comment_id, _now()),
    )
    db.commit()
    return cursor.rowcount > 0


def unlikeComment(db: sqlite3.Connection, user_id: str, comment_id: int) -> bool:
    cursor = db.execute(
        "DELETE FROM comment_likes WHERE user_id = ? AND comment_id = ?", (user_id, comment_id)
    )
    db.commit()
    return cursor.rowcount > 0


def likedCommentIds(db: sqlite3.Connection, user_id: str, comment_ids: list[int]) -> set[int]:
    return _userMarks(db, "comment_likes", "comment_id", user_id, comment_ids)


# -- Bookmarks --


def addBookmark(db: sqlite3.Connection, user_id: str, project_id: int) -> bool:
    """Bookmark a project. Returns False if already bookmarked."""
    cursor = db.execute(
        "INSERT OR IGNORE INTO bookmarks (user_id, project_id, created_at) VALUES (?, ?, ?)",
        (user_id, project_id, _now()),
    )
    db.commit()
    return cursor.rowcount > 0


def removeBookmark(db: sqlite3.Connection, user_id: str, project_id: int) -> bool:
    cursor = db.execute(
        "DELETE FROM bookmarks WHERE user_id = ? AND project_id = ?", (user_id, project_id)
    )
    db.commit()
    return cursor.rowcount > 0


def bookmarkedProjectIds(
    db: sqlite3.Connection, user_id: str, project_ids: list[int]
) -> set[int]:
    return _userMarks(db, "bookmarks", "project_id", user_id, project_ids)


def listBookmarks(db: sqlite3.Connection, user_id: str) -> list[sqlite3.Row]:
    """User's bookmarked visible projects, most recently bookmarked first."""
    return db.execute(
        f"""SELECT {_PROJECT_COLUMNS}, b.created_at AS bookmarked_at
            FROM bookmarks b JOIN projects p ON p.id = b.project_id
            LEFT JOIN categories c ON c.id = p.category_id
            WHERE b.user_id = ? AND p.status IN ({_placeholders(VISIBLE_STATUSES)})
            ORDER BY b.created_at DESC, b.id DESC""",
        [user_id, *VISIBLE_STATUSES],
    ).fetchall()


# -- Collections --


def insertCollection(
    db: sqlite3.Connection,
    user_id: str,
    name: str,
    description: str | None = None,
    is_public: bool = False,
) -> int:
    """Create a collection. Returns collection ID."""
    now = _now()
    cursor = db.execute(
        """INSERT INTO collections (user_id, name, description, is_public, created_at, updated_at)
           VALUES (?, ?, ?, ?, ?, ?)""",
        (user_id, name, description, int(is_public), now, now),
    )
    db.commit()
    assert cursor.lastrowid is not None
    return cursor.lastrowid


def getCollection(db: sqlite3.Connection, collection_id: int) -> sqlite3.Row | None:
    return db.execute("SELECT * FROM collections WHERE id = ?", (collection_id,)).fetchone()


def listUserCollections(db: sqlite3.Connection, user_id: str) -> list[sqlite3.Row]:
    return db.execute(
        "SELECT * FROM collections WHERE user_id = ? ORDER BY created_at DESC, id DESC",
        (user_id,),
    ).fetchall()


def listPublicCollections(
    db: sqlite3.Connection, limit: int = 20, offset: int = 0
) -> list[sqlite3.Row]:
    """Public collections, largest first."""
    return db.execute(
        """SELECT * FROM collections WHERE is_public = 1
           ORDER BY projects_count DESC, created_at DESC, id DESC LIMIT ? OFFSET ?""",
        (limit, offset),
    ).fetchall()


def updateCollection(
    db: sqlite3.Connection,
    collection_id: int,
    name: str | None = None,
    description: str | None = None,
    is_public: bool | None = None,
) -> bool:
    """Update the given fields. Returns True if found."""
    fields: dict[str, str | int] = {}
    if name is not None:
        fields["name"] = name
    if description is not None:
        fields["description"] = description
    if is_public is not None:
        fields["is_public"] = int(is_public)
    fields["updated_at"] = _now()
    assignments = ", ".join(f"{col} = ?" for col in fields)
    cursor = db.execute(
        f"UPDATE collections SET {assignments} WHERE id = ?", [*fields.values(), collection_id]
    )
    db.commit()
    return cursor.rowcount > 0


def deleteCollection(db: sqlite3.Connection, collection_id: int) -> bool:
    cursor = db.execute("DELETE FROM collections WHERE id = ?", (collection_id,))
    db.commit()
    return cursor.rowcount > 0


def addToCollection(db: sqlite3.Connection, collection_id: int, project_id: int) -> bool:
    """Add a project to a collection. Returns False if it was already there."""
    cursor = db.execute(
        """INSERT OR IGNORE INTO collection_projects (collection_id, project_id, added_at)
           VALUES (?, ?, ?)""",
        (collection_id, project_id, _now()),
    )
    db.commit()
    return cursor.rowcount > 0


def removeFromCollection(db: sqlite3.Connection, collection_id: int, project_id: int) -> bool:
    cursor = db.execute(
        "DELETE FROM collection_projects WHERE collection_id = ? AND project_id = ?",
        (collection_id, project_id),
    )
    db.commit()
    return cursor.rowcount > 0


def listCollectionProjects(db: sqlite3.Connection, collection_id: int) -> list[sqlite3.Row]:
    """Visible projects in a collection, most recently added first."""
    return db.execute(
        f"""SELECT {_PROJECT_COLUMNS}, cp.added_at
            FROM collection_projects cp JOIN projects p ON p.id = cp.project_id
            LEFT JOIN categories c ON c.id = p.category_id
            WHERE cp.collection_id = ? AND p.status IN ({_placeholders(VISIBLE_STATUSES)})
            ORDER BY cp.added_at DESC, cp.id DESC""",
        [collection_id, *VISIBLE_STATUSES],
    ).fetchall()


# -- Stats --


def _count(db: sqlite3.Connection, sql: str, params: list | tuple = ()) -> int:
    return db.execute(sql, params).fetchone()[0]


def platformStats(db: sqlite3.Connection) -> dict:
    """Visible projects, distinct submitters, active categories."""
    visible = f"status IN ({_placeholders(VISIBLE_STATUSES)})"
    return {
        "projects_count": _count(
            db, f"SELECT COUNT(*) FROM projects WHERE {visible}", VISIBLE_STATUSES
        ),
        "users_count": _count(
            db, f"SELECT COUNT(DISTINCT user_id) FROM projects WHERE {visible}", VISIBLE_STATUSES
        ),
        "categories_count": _count(db, "SELECT COUNT(*) FROM categories WHERE is_active = 1"),
    }


def adminStats(db: sqlite3.Connection) -> dict:
    """Totals across every project status, for moderation."""
    by_status = {
        row[0]: row[1]
        for row in db.execute("SELECT status, COUNT(*) FROM projects GROUP BY status")
    }
    users = _count(
        db,
        """SELECT COUNT(*) FROM (
               SELECT user_id FROM projects UNION SELECT user_id FROM votes
               UNION SELECT user_id FROM comments
           )""",
    )
    return {
        "total_projects": sum(by_status.values()),
        **{f"{status}_projects": by_status.get(status, 0) for status in PROJECT_STATUSES},
        "total_users": users,
        "total_upvotes": _count(db, "SELECT COUNT(*) FROM votes"),
        "total_comments": _count(db, "SELECT COUNT(*) FROM comments WHERE is_deleted = 0"),
    }
