"""SQLite-based persistent storage for projects, users and webhook events.

Uses aiosqlite for async database operations. Projects survive server
restarts; ``webhook_events`` gives billing webhooks durable de-duplication
across processes.
"""

import logging
from pathlib import Path
from typing import Any, Optional

import aiosqlite

from models.project import (
    PLAN_VIDEO_LIMITS,
    PlanType,
    Project,
    ProjectStatus,
    QuotaStatus,
    User,
    now_ms,
)

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = ".data/demodrop.db"

PROJECT_COLUMNS = {
    "status",
    "progress",
    "prompt",
    "video_job_id",
    "video_url",
    "error",
    "completed_at",
}

USER_COLUMNS = {
    "email",
    "plan_type",
    "videos_used",
    "videos_limit",
    "stripe_customer_id",
    "stripe_subscription_id",
    "subscription_status",
}


class ProjectStore:
    """Async SQLite store.

    Also serves as the quota provider (``check_quota`` / ``record_usage``)
    and the webhook event ledger (``claim_event`` / ``release_event``).
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH):
        """
        Args:
            db_path: Path to SQLite database file, or ``:memory:``. The parent
                directory is created if it doesn't exist.
        """
        self.db_path = db_path
        self.db: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Open the connection, enable WAL mode and create the schema."""
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        self.db = await aiosqlite.connect(self.db_path)
        self.db.row_factory = aiosqlite.Row

        await self.db.execute("PRAGMA journal_mode=WAL")

        await self.db.execute("""
            CREATE TABLE IF NOT EXISTS projects (
                id TEXT PRIMARY KEY,
                user_id TEXT,
                website_url TEXT NOT NULL,
                style_preset TEXT NOT NULL,
                custom_instructions TEXT,
                video_style TEXT,
                status TEXT NOT NULL DEFAULT 'scraping',
                progress INTEGER NOT NULL DEFAULT 0,
                prompt TEXT,
                video_job_id TEXT,
                video_url TEXT,
                error TEXT,
                created_at INTEGER NOT NULL,
                completed_at INTEGER
            )
        """)
        await self.db.execute("""
            CREATE INDEX IF NOT EXISTS idx_projects_user_created
            ON projects (user_id, created_at DESC)
        """)

        await self.db.execute("""
            CREATE TABLE IF NOT EXISTS users (
                id TEXT PRIMARY KEY,
                email TEXT,
                plan_type TEXT NOT NULL DEFAULT 'free',
                videos_used INTEGER NOT NULL DEFAULT 0,
                videos_limit INTEGER DEFAULT 1,
                stripe_customer_id TEXT,
                stripe_subscription_id TEXT,
                subscription_status TEXT,
                created_at INTEGER NOT NULL,
                updated_at INTEGER NOT NULL
            )
        """)
        await self.db.execute("""
            CREATE INDEX IF NOT EXISTS idx_users_customer
            ON users (stripe_customer_id)
        """)

        await self.db.execute("""
            CREATE TABLE IF NOT EXISTS webhook_events (
                id TEXT PRIMARY KEY,
                type TEXT NOT NULL,
                received_at INTEGER NOT NULL
            )
        """)

        await self.db.commit()
        logger.info(f"Project store connected: {self.db_path}")

    async def close(self) -> None:
        """Close database connection."""
        if self.db:
            await self.db.close()
            self.db = None
            logger.info("Project store connection closed")

    def _require_db(self) -> aiosqlite.Connection:
        if self.db is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self.db

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    async def create_project(
        self,
        project_id: str,
        website_url: str,
        style_preset: str,
        user_id: Optional[str] = None,
        custom_instructions: Optional[str] = None,
        video_style: Optional[str] = None,
    ) -> Project:
        """Insert a new project in the ``scraping`` state.

        Raises:
            RuntimeError: If database is not connected
        """
        db = self._require_db()
        project = Project(
            id=project_id,
            user_id=user_id,
            website_url=website_url,
            style_preset=style_preset,
            custom_instructions=custom_instructions,
            video_style=video_style,
            created_at=now_ms(),
        )

        await db.execute(
            """INSERT INTO projects (id, user_id, website_url, style_preset, custom_instructions,
                                     video_style, status, progress, created_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                project.id,
                project.user_id,
                project.website_url,
                project.style_preset,
                project.custom_instructions,
                project.video_style,
                project.status.value,
                project.progress,
                project.created_at,
            ),
        )
        await db.commit()

        logger.info(f"Created project {project_id} for {website_url}")
        return project

    async def start_run(self, project_id: str, progress: int) -> bool:
        """Claim a fresh project for a pipeline run.

        Only a project that has never been worked on (``scraping``, progress 0,
        no video job) can be claimed, and only once.
        """
        db = self._require_db()
        cursor = await db.execute(
            """
            UPDATE projects SET progress = ?
            WHERE id = ? AND status = ? AND progress = 0 AND video_job_id IS NULL
            """,
            (max(1, min(100, int(progress))), project_id, ProjectStatus.SCRAPING.value),
        )
        await db.commit()
        return cursor.rowcount > 0

    async def get_project(self, project_id: str) -> Optional[Project]:
        db = self._require_db()
        async with db.execute("SELECT * FROM projects WHERE id = ?", (project_id,)) as cursor:
            row = await cursor.fetchone()
            return self._row_to_project(row) if row else None

    async def update_project(self, project_id: str, **fields: Any) -> Optional[Project]:
        """Update selected project columns.

        ``progress`` never decreases: a lower value than the stored one is
        ignored.

        Returns:
            Updated project or None if not found

        Raises:
            ValueError: On an unknown column
            RuntimeError: If database is not connected
        """
        db = self._require_db()

        unknown = set(fields) - PROJECT_COLUMNS
        if unknown:
            raise ValueError(f"Unknown project fields: {', '.join(sorted(unknown))}")
        if not fields:
            return await self.get_project(project_id)

        assignments = []
        params: list[Any] = []
        for column, value in fields.items():
            if isinstance(value, ProjectStatus):
                value = value.value
            if column == "progress":
                assignments.append("progress = MAX(progress, ?)")
                value = max(0, min(100, int(value)))
            else:
                assignments.append(f"{column} = ?")
            params.append(value)
        params.append(project_id)

        cursor = await db.execute(
            f"UPDATE projects SET {', '.join(assignments)} WHERE id = ?",
            params,
        )
        await db.commit()

        if cursor.rowcount == 0:
            return None

        logger.debug(f"Updated project {project_id}: {', '.join(fields)}")
        return await self.get_project(project_id)

    async def list_projects(
        self,
        user_id: Optional[str],
        status: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 100,
    ) -> list[Project]:
        """List a user's projects, newest first.

        Args:
            user_id: Owner
            status: Filter by status (optional)
            search: Case-insensitive substring of the website URL (optional)
            limit: Max results (default 100)
        """
        db = self._require_db()

        query = "SELECT * FROM projects WHERE user_id IS ?"
        params: list[Any] = [user_id]

        if status:
            query += " AND status = ?"
            params.append(status)
        if search:
            query += " AND LOWER(website_url) LIKE ?"
            params.append(f"%{search.lower()}%")

        query += " ORDER BY created_at DESC LIMIT ?"
        params.append(limit)

        async with db.execute(query, params) as cursor:
            rows = await cursor.fetchall()
            return [self._row_to_project(row) for row in rows]

    async def delete_project(self, project_id: str) -> bool:
        """Delete a project. Returns True if a row was removed."""
        db = self._require_db()
        cursor = await db.execute("DELETE FROM projects WHERE id = ?", (project_id,))
        await db.commit()

        deleted = cursor.rowcount > 0
        if deleted:
            logger.info(f"Deleted project {project_id}")
        return deleted

    # ------------------------------------------------------------------
    # Users and quota
    # ------------------------------------------------------------------

    async def get_user(self, user_id: str) -> Optional[User]:
        db = self._require_db()
        async with db.execute("SELECT * FROM users WHERE id = ?", (user_id,)) as cursor:
            row = await cursor.fetchone()
            return self._row_to_user(row) if row else None

    async def get_user_by_customer(self, customer_id: str) -> Optional[User]:
        db = self._require_db()
        async with db.execute(
            "SELECT * FROM users WHERE stripe_customer_id = ?", (customer_id,)
        ) as cursor:
            row = await cursor.fetchone()
            return self._row_to_user(row) if row else None

    async def get_or_create_user(self, user_id: str, email: Optional[str] = None) -> User:
        """Return the user, creating a free-plan row on first sight."""
        user = await self.get_user(user_id)
        if user is not None:
            if email and user.email != email:
                user = await self.update_user(user_id, email=email) or user
            return user

        db = self._require_db()
        now = now_ms()
        await db.execute(
            """INSERT OR IGNORE INTO users (id, email, plan_type, videos_used, videos_limit,
                                            created_at, updated_at)
               VALUES (?, ?, ?, 0, ?, ?, ?)""",
            (user_id, email, PlanType.FREE.value, PLAN_VIDEO_LIMITS[PlanType.FREE], now, now),
        )
        await db.commit()
        logger.info(f"Created user {user_id} on the free plan")
        return await self.get_user(user_id)

    async def update_user(self, user_id: str, **fields: Any) -> Optional[User]:
        """Update selected user columns.

        Raises:
            ValueError: On an unknown column
        """
        db = self._require_db()

        unknown = set(fields) - USER_COLUMNS
        if unknown:
            raise ValueError(f"Unknown user fields: {', '.join(sorted(unknown))}")

        assignments = []
        params: list[Any] = []
        for column, value in fields.items():
            if isinstance(value, PlanType):
                value = value.value
            assignments.append(f"{column} = ?")
            params.append(value)
        assignments.append("updated_at = ?")
        params += [now_ms(), user_id]

        cursor = await db.execute(
            f"UPDATE users SET {', '.join(assignments)} WHERE id = ?",
            params,
        )
        await db.commit()

        if cursor.rowcount == 0:
            return None
        return await self.get_user(user_id)

    async def set_plan(self, user_id: str, plan: PlanType, **fields: Any) -> Optional[User]:
        """Move a user to ``plan`` and apply the plan's video limit."""
        return await self.update_user(
            user_id,
            plan_type=plan,
            videos_limit=PLAN_VIDEO_LIMITS[plan],
            **fields,
        )

    async def check_quota(self, user_id: str) -> QuotaStatus:
        user = await self.get_or_create_user(user_id)
        allowed = user.videos_limit is None or user.videos_used < user.videos_limit
        return QuotaStatus(
            allowed=allowed,
            plan_type=user.plan_type,
            videos_used=user.videos_used,
            videos_limit=user.videos_limit,
        )

    async def record_usage(self, user_id: str) -> bool:
        """Consume one video from the user's quota.

        The limit check and the increment are a single UPDATE, so concurrent
        submits can never push ``videos_used`` past ``videos_limit``.

        Returns:
            False if the user has no quota left (or does not exist)
        """
        db = self._require_db()
        cursor = await db.execute(
            """
            UPDATE users SET videos_used = videos_used + 1, updated_at = ?
            WHERE id = ? AND (videos_limit IS NULL OR videos_used < videos_limit)
            """,
            (now_ms(), user_id),
        )
        await db.commit()
        return cursor.rowcount > 0

    # ------------------------------------------------------------------
    # Webhook events
    # ------------------------------------------------------------------

    async def claim_event(self, event_id: str, event_type: str) -> bool:
        """Record ``event_id`` as handled. False if it was already claimed."""
        db = self._require_db()
        cursor = await db.execute(
            "INSERT OR IGNORE INTO webhook_events (id, type, received_at) VALUES (?, ?, ?)",
            (event_id, event_type, now_ms()),
        )
        await db.commit()
        return cursor.rowcount > 0

    async def release_event(self, event_id: str) -> None:
        """Forget a claim so a redelivery of ``event_id`` is handled again."""
        db = self._require_db()
        await db.execute("DELETE FROM webhook_events WHERE id = ?", (event_id,))
        await db.commit()

    # ------------------------------------------------------------------

    def _row_to_project(self, row: aiosqlite.Row) -> Project:
        return Project(
            id=row["id"],
            user_id=row["user_id"],
            website_url=row["website_url"],
            style_preset=row["style_preset"],
            custom_instructions=row["custom_instructions"],
            video_style=row["video_style"],
            status=ProjectStatus(row["status"]),
            progress=row["progress"],
            prompt=row["prompt"],
            video_job_id=row["video_job_id"],
            video_url=row["video_url"],
            error=row["error"],
            created_at=row["created_at"],
            completed_at=row["completed_at"],
        )

    def _row_to_user(self, row: aiosqlite.Row) -> User:
        return User(
            id=row["id"],
            email=row["email"],
            plan_type=PlanType(row["plan_type"]),
            videos_used=row["videos_used"],
            videos_limit=row["videos_limit"],
            stripe_customer_id=row["stripe_customer_id"],
            stripe_subscription_id=row["stripe_subscription_id"],
            subscription_status=row["subscription_status"],
        )


# Global instance
_project_store: ProjectStore | None = None


async def get_project_store(db_path: str = DEFAULT_DB_PATH) -> ProjectStore:
    """Get or create the global project store instance.

    Args:
        db_path: Path to SQLite database file

    Returns:
        Connected ProjectStore instance
    """
    global _project_store
    if _project_store is None:
        _project_store = ProjectStore(db_path)
        await _project_store.connect()
    return _project_store


async def close_project_store() -> None:
    """Close the global project store connection."""
    global _project_store
    if _project_store:
        await _project_store.close()
        _project_store = None
