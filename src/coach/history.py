import logging
import sqlite3
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait as wait_futures
from datetime import datetime
from pathlib import Path
from typing import Protocol, runtime_checkable

import httpx

from coach.models import AuthenticatedIdentity, HistoryRecord, Identity

logger = logging.getLogger(__name__)


class StorageError(Exception):
    pass


@runtime_checkable
class HistoryStore(Protocol):
    def append(
        self, record: HistoryRecord, access_token: str | None = None
    ) -> None: ...

    def close(self) -> None: ...


SCHEMA_VERSION = 1

SCHEMA = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY
);

CREATE TABLE IF NOT EXISTS chat_history (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    message TEXT NOT NULL,
    response TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_chat_history_user_id ON chat_history(user_id);
"""


class SQLiteHistoryStore:
    def __init__(self, db_path: str | Path = "data/chat_history.db"):
        self.db_path = Path(db_path)
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self) -> None:
        self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")

        cursor = self._conn.cursor()
        cursor.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name='schema_version'"
        )
        if not cursor.fetchone():
            cursor.executescript(SCHEMA)
            cursor.execute(
                "INSERT INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,)
            )
            self._conn.commit()
            logger.info(f"History database initialized at {self.db_path}")
        else:
            cursor.execute("SELECT version FROM schema_version")
            row = cursor.fetchone()
            if row and row[0] != SCHEMA_VERSION:
                logger.warning(
                    f"Schema version mismatch: expected {SCHEMA_VERSION}, got {row[0]}"
                )

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StorageError("Database connection not initialized")
        return self._conn

    def close(self) -> None:
        with self._lock:
            if self._conn:
                self._conn.close()
                self._conn = None

    def append(self, record: HistoryRecord, access_token: str | None = None) -> None:
        try:
            with self._lock:
                self.conn.execute(
                    """
                    INSERT INTO chat_history (user_id, message, response, created_at)
                    VALUES (?, ?, ?, ?)
                    """,
                    (
                        record.user_id,
                        record.message,
                        record.response,
                        record.created_at.isoformat(),
                    ),
                )
                self.conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to save chat history: {e}") from e

    def recent(self, user_id: str, limit: int = 20) -> list[HistoryRecord]:
        with self._lock:
            rows = self.conn.execute(
                """
                SELECT user_id, message, response, created_at FROM chat_history
                WHERE user_id = ? ORDER BY id DESC LIMIT ?
                """,
                (user_id, limit),
            ).fetchall()
        return [
            HistoryRecord(
                user_id=row["user_id"],
                message=row["message"],
                response=row["response"],
                created_at=datetime.fromisoformat(row["created_at"]),
            )
            for row in rows
        ]

    def count(self) -> int:
        with self._lock:
            row = self.conn.execute("SELECT COUNT(*) FROM chat_history").fetchone()
        return int(row[0] if row else 0)


class RestHistoryStore:
    """Appends rows through a PostgREST endpoint (``/rest/v1/<table>``)."""

    def __init__(
        self,
        url: str,
        api_key: str,
        *,
        table: str = "chat_history",
        access_token: str | None = None,
        client: httpx.Client | None = None,
        timeout: float = 10.0,
    ):
        self.endpoint = f"{url.rstrip('/')}/rest/v1/{table}"
        self.api_key = api_key
        self.access_token = access_token
        self._client = client
        self.timeout = timeout

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=self.timeout)
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def append(self, record: HistoryRecord, access_token: str | None = None) -> None:
        token = access_token or self.access_token or self.api_key
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Prefer": "return=minimal",
        }
        body = {
            "user_id": record.user_id,
            "message": record.message,
            "response": record.response,
        }
        try:
            response = self.client.post(self.endpoint, headers=headers, json=body)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise StorageError(f"Failed to save chat history: {e}") from e


class NullHistoryStore:
    def append(self, record: HistoryRecord, access_token: str | None = None) -> None:
        logger.debug(f"History disabled, dropping record for {record.user_id}")

    def close(self) -> None:
        pass


class HistoryPersister:
    """Writes exchanges to a ``HistoryStore`` in the background.

    ``persist`` never raises. Store failures are logged and dropped so a broken
    history backend cannot affect chat delivery. Authenticated exchanges are
    written with the user's session token.

    ``close`` waits for this persister's pending writes (when ``wait``), then
    closes the store. A shared executor is left running.
    """

    def __init__(
        self,
        store: HistoryStore,
        *,
        executor: ThreadPoolExecutor | None = None,
        max_workers: int = 2,
    ):
        self.store = store
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="coach-history"
        )
        self._pending: set[Future] = set()
        self._lock = threading.Lock()

    def persist(self, identity: Identity, message: str, response: str) -> Future | None:
        user_id = identity.user_id
        if not user_id:
            logger.debug("Skipping history write for identity without a user id")
            return None

        access_token = None
        if isinstance(identity, AuthenticatedIdentity):
            access_token = identity.session_token

        try:
            record = HistoryRecord(user_id=user_id, message=message, response=response)
            future = self._executor.submit(self._write, record, access_token)
        except Exception as e:
            logger.error(f"Failed to schedule chat history write: {e}")
            return None

        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._discard)
        return future

    def _discard(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    def _write(self, record: HistoryRecord, access_token: str | None = None) -> None:
        try:
            self.store.append(record, access_token=access_token)
            logger.debug(f"Chat history saved for user {record.user_id}")
        except Exception as e:
            logger.error(f"Failed to store chat history: {e}")

    def close(self, wait: bool = True) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=wait)
        elif wait:
            with self._lock:
                pending = list(self._pending)
            wait_futures(pending)
        self.store.close()
