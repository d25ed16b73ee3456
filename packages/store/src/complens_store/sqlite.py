"""SQLiteStore: local file-based store for submissions and review state.

Schema:
  packages: one row per submission, with the latest AI review flattened
    onto it (criteria as a JSON column, no sub-table, so reads never JOIN).
  admin_settings: key/value policy flags.
  ai_provider_settings: one row per configured model provider.
  ai_prompt_versions: every saved review prompt; at most one is active.

One connection is shared by the review scheduler's worker threads, so every
statement runs under a lock.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
import uuid

from complens_core.models import (
    NOT_REVIEWED,
    PENDING,
    PROVIDERS,
    AdminPolicy,
    CriterionResult,
    PackageInfo,
    ProviderConfig,
    ReviewResult,
    StatusTransition,
    utc_now,
)
from complens_store.base import BaseStore
from complens_store.models import ADMIN_SETTING_KEYS, KEY_MASK, PromptVersion, ProviderSetting, is_masked

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS packages (
    id                       TEXT PRIMARY KEY,
    name                     TEXT NOT NULL,
    version                  TEXT NOT NULL,
    repository_url           TEXT,
    submitted_at             TEXT NOT NULL,
    review_status            TEXT NOT NULL DEFAULT 'pending',
    reviewed_by              TEXT,
    reviewed_at              TEXT,
    review_notes             TEXT,
    ai_review_status         TEXT NOT NULL DEFAULT 'not_reviewed',
    ai_review_summary        TEXT,
    ai_review_criteria_json  TEXT,
    ai_review_error          TEXT,
    ai_reviewed_at           TEXT
);
CREATE INDEX IF NOT EXISTS idx_packages_name ON packages (name);
CREATE INDEX IF NOT EXISTS idx_packages_ai_status ON packages (ai_review_status);

CREATE TABLE IF NOT EXISTS admin_settings (
    key    TEXT PRIMARY KEY,
    value  TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS ai_provider_settings (
    provider    TEXT PRIMARY KEY,
    api_key     TEXT,
    model       TEXT,
    is_enabled  INTEGER NOT NULL DEFAULT 0,
    updated_at  TEXT
);

CREATE TABLE IF NOT EXISTS ai_prompt_versions (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    content     TEXT NOT NULL,
    is_active   INTEGER NOT NULL DEFAULT 0,
    is_default  INTEGER NOT NULL DEFAULT 0,
    created_at  TEXT NOT NULL,
    created_by  TEXT,
    notes       TEXT
);
"""


class SQLiteStore(BaseStore):
    """Stores submissions and review state in a local SQLite database file.

    The database file path defaults to `.complens.db` in the current working
    directory. Configure via .complens.yml: `store_path: /path/to/complens.db`.
    Pass ":memory:" for a throwaway store.
    """

    def __init__(self, db_path: str = ".complens.db"):
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(_SCHEMA)
        self._conn.commit()

    # --- packages -------------------------------------------------------

    def add_package(self, name: str, version: str, repository_url: str | None = None) -> str:
        package_id = uuid.uuid4().hex
        with self._lock:
            self._conn.execute(
                """
                INSERT INTO packages (id, name, version, repository_url, submitted_at, review_status, ai_review_status)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (package_id, name, version, repository_url or None, utc_now(), PENDING, NOT_REVIEWED),
            )
            self._conn.commit()
        logger.debug("Added package %s@%s as %s", name, version, package_id)
        return package_id

    def get_package(self, package_id: str) -> PackageInfo | None:
        with self._lock:
            row = self._conn.execute("SELECT * FROM packages WHERE id=?", (package_id,)).fetchone()
        return self._row_to_package(row) if row else None

    def get_package_by_name(self, name: str) -> PackageInfo | None:
        # Latest submission wins when a name was submitted more than once.
        with self._lock:
            row = self._conn.execute(
                "SELECT * FROM packages WHERE name=? ORDER BY submitted_at DESC, rowid DESC LIMIT 1",
                (name,),
            ).fetchone()
        return self._row_to_package(row) if row else None

    def list_packages(self, ai_status: str | None = None) -> list[PackageInfo]:
        with self._lock:
            if ai_status is not None:
                rows = self._conn.execute(
                    "SELECT * FROM packages WHERE ai_review_status=? ORDER BY submitted_at DESC, rowid DESC",
                    (ai_status,),
                ).fetchall()
            else:
                rows = self._conn.execute("SELECT * FROM packages ORDER BY submitted_at DESC, rowid DESC").fetchall()
        return [self._row_to_package(r) for r in rows]

    # --- AI review state ------------------------------------------------

    def set_ai_review_status(self, package_id: str, status: str) -> None:
        self._update_package(package_id, "ai_review_status=?", (status,))

    def save_ai_review_result(self, package_id: str, result: ReviewResult) -> None:
        criteria_json = json.dumps([{"name": c.name, "passed": c.passed, "notes": c.notes} for c in result.criteria])
        self._update_package(
            package_id,
            "ai_review_status=?, ai_review_summary=?, ai_review_criteria_json=?, ai_review_error=?, ai_reviewed_at=?",
            (result.status, result.summary, criteria_json, result.error, result.reviewed_at),
        )

    def update_review_status(self, package_id: str, transition: StatusTransition) -> None:
        self._update_package(
            package_id,
            "review_status=?, reviewed_by=?, reviewed_at=?, review_notes=?",
            (transition.review_status, transition.reviewed_by, utc_now(), transition.notes),
        )

    def _update_package(self, package_id: str, assignments: str, params: tuple) -> None:
        with self._lock:
            cur = self._conn.execute(f"UPDATE packages SET {assignments} WHERE id=?", (*params, package_id))
            self._conn.commit()
        if cur.rowcount == 0:
            raise KeyError(package_id)

    # --- admin policy ---------------------------------------------------

    def get_admin_policy(self) -> AdminPolicy:
        with self._lock:
            rows = self._conn.execute("SELECT key, value FROM admin_settings").fetchall()
        values = {r["key"]: r["value"] == "true" for r in rows}
        return AdminPolicy(
            auto_approve_on_pass=values.get("auto_approve_on_pass", False),
            auto_reject_on_fail=values.get("auto_reject_on_fail", False),
        )

    def update_admin_setting(self, key: str, value: bool) -> None:
        if key not in ADMIN_SETTING_KEYS:
            raise ValueError(f"Unknown admin setting {key!r}. Choose one of: {', '.join(ADMIN_SETTING_KEYS)}")
        with self._lock:
            self._conn.execute(
                "INSERT INTO admin_settings (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value=excluded.value",
                (key, "true" if value else "false"),
            )
            self._conn.commit()

    # --- provider settings ----------------------------------------------

    def update_provider_settings(
        self,
        provider: str,
        api_key: str | None = None,
        model: str | None = None,
        is_enabled: bool = False,
    ) -> None:
        if provider not in PROVIDERS:
            raise ValueError(f"Unknown provider {provider!r}. Choose one of: {', '.join(PROVIDERS)}")
        keep_key = not api_key or is_masked(api_key)

        with self._lock:
            if is_enabled:
                self._conn.execute("UPDATE ai_provider_settings SET is_enabled=0 WHERE provider<>?", (provider,))
            existing = self._conn.execute(
                "SELECT api_key FROM ai_provider_settings WHERE provider=?", (provider,)
            ).fetchone()
            if existing is not None:
                stored_key = existing["api_key"] if keep_key else api_key
                self._conn.execute(
                    "UPDATE ai_provider_settings SET api_key=?, model=?, is_enabled=?, updated_at=? WHERE provider=?",
                    (stored_key, model, int(is_enabled), utc_now(), provider),
                )
            else:
                self._conn.execute(
                    "INSERT INTO ai_provider_settings (provider, api_key, model, is_enabled, updated_at) "
                    "VALUES (?, ?, ?, ?, ?)",
                    (provider, None if keep_key else api_key, model, int(is_enabled), utc_now()),
                )
            self._conn.commit()
        logger.debug("Updated %s provider settings (enabled=%s)", provider, is_enabled)

    def get_provider_settings(self) -> tuple[list[ProviderSetting], str | None]:
        with self._lock:
            rows = {
                r["provider"]: r for r in self._conn.execute("SELECT * FROM ai_provider_settings").fetchall()
            }

        settings: list[ProviderSetting] = []
        active: str | None = None
        for provider in PROVIDERS:
            row = rows.get(provider)
            if row is None:
                settings.append(ProviderSetting(provider=provider, api_key=None, model=None, is_enabled=False))
                continue
            settings.append(
                ProviderSetting(
                    provider=provider,
                    api_key=KEY_MASK if row["api_key"] else None,
                    model=row["model"],
                    is_enabled=bool(row["is_enabled"]),
                    updated_at=row["updated_at"],
                )
            )
            if row["is_enabled"]:
                active = provider
        return settings, active

    def clear_provider_settings(self, provider: str) -> None:
        with self._lock:
            self._conn.execute("DELETE FROM ai_provider_settings WHERE provider=?", (provider,))
            self._conn.commit()

    def get_active_provider(self) -> ProviderConfig | None:
        with self._lock:
            rows = {
                r["provider"]: r
                for r in self._conn.execute("SELECT * FROM ai_provider_settings WHERE is_enabled=1").fetchall()
            }
        for provider in PROVIDERS:
            row = rows.get(provider)
            if row is not None and row["api_key"] and row["model"]:
                return ProviderConfig(provider=provider, api_key=row["api_key"], model=row["model"])
        return None

    # --- prompt versions ------------------------------------------------

    def save_prompt_version(self, content: str, notes: str | None = None, created_by: str | None = None) -> int:
        if not content or not content.strip():
            raise ValueError("Prompt content cannot be empty")
        with self._lock:
            self._conn.execute("UPDATE ai_prompt_versions SET is_active=0 WHERE is_active=1")
            cur = self._conn.execute(
                "INSERT INTO ai_prompt_versions (content, is_active, is_default, created_at, created_by, notes) "
                "VALUES (?, 1, 0, ?, ?, ?)",
                (content, utc_now(), created_by, notes),
            )
            self._conn.commit()
        return cur.lastrowid

    def activate_prompt_version(self, version_id: int) -> None:
        with self._lock:
            exists = self._conn.execute("SELECT 1 FROM ai_prompt_versions WHERE id=?", (version_id,)).fetchone()
            if exists is None:
                raise KeyError(version_id)
            self._conn.execute("UPDATE ai_prompt_versions SET is_active=0 WHERE is_active=1")
            self._conn.execute("UPDATE ai_prompt_versions SET is_active=1 WHERE id=?", (version_id,))
            self._conn.commit()

    def reset_to_default_prompt(self, default_content: str) -> int:
        with self._lock:
            self._conn.execute("UPDATE ai_prompt_versions SET is_active=0 WHERE is_active=1")
            row = self._conn.execute(
                "SELECT id FROM ai_prompt_versions WHERE is_default=1 ORDER BY id LIMIT 1"
            ).fetchone()
            if row is not None:
                version_id = row["id"]
                self._conn.execute("UPDATE ai_prompt_versions SET is_active=1 WHERE id=?", (version_id,))
            else:
                cur = self._conn.execute(
                    "INSERT INTO ai_prompt_versions (content, is_active, is_default, created_at, created_by, notes) "
                    "VALUES (?, 1, 1, ?, 'system', 'Default prompt')",
                    (default_content, utc_now()),
                )
                version_id = cur.lastrowid
            self._conn.commit()
        return version_id

    def get_active_prompt(self) -> str | None:
        with self._lock:
            row = self._conn.execute(
                "SELECT content, is_default FROM ai_prompt_versions WHERE is_active=1 LIMIT 1"
            ).fetchone()
        if row is None or row["is_default"]:
            return None
        return row["content"]

    def list_prompt_versions(self, limit: int = 50) -> list[PromptVersion]:
        with self._lock:
            rows = self._conn.execute(
                "SELECT * FROM ai_prompt_versions ORDER BY created_at DESC, id DESC LIMIT ?", (limit,)
            ).fetchall()
        return [
            PromptVersion(
                id=r["id"],
                content=r["content"],
                is_active=bool(r["is_active"]),
                is_default=bool(r["is_default"]),
                created_at=r["created_at"],
                created_by=r["created_by"],
                notes=r["notes"],
            )
            for r in rows
        ]

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    @staticmethod
    def _row_to_package(row: sqlite3.Row) -> PackageInfo:
        ai_review = None
        if row["ai_reviewed_at"]:
            criteria_data = json.loads(row["ai_review_criteria_json"] or "[]")
            ai_review = ReviewResult(
                status=row["ai_review_status"],
                summary=row["ai_review_summary"] or "",
                criteria=[
                    CriterionResult(name=c.get("name", ""), passed=bool(c.get("passed")), notes=c.get("notes", ""))
                    for c in criteria_data
                ],
                error=row["ai_review_error"],
                reviewed_at=row["ai_reviewed_at"],
            )
        return PackageInfo(
            id=row["id"],
            name=row["name"],
            version=row["version"],
            repository_url=row["repository_url"],
            review_status=row["review_status"],
            reviewed_by=row["reviewed_by"],
            reviewed_at=row["reviewed_at"],
            review_notes=row["review_notes"],
            ai_review_status=row["ai_review_status"],
            ai_review=ai_review,
        )
