from __future__ import annotations

import json
import logging
import threading
import time
import uuid
from pathlib import Path
from typing import Any

from vetfinder.application.ports.session_store import SessionStorePort
from vetfinder.domain.entities.session import SessionRecord


class JsonSessionStore(SessionStorePort):
    """All sessions in a single JSON file, rewritten atomically on every change."""

    def __init__(self, path: str = "./data/sessions.json") -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    def _load(self) -> dict[str, dict[str, Any]]:
        """Load all sessions, return empty if the file is missing or corrupted."""
        if not self._path.exists():
            return {}
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            self._logger.warning("Session file unreadable, starting empty", extra={"reason": str(e)})
            return {}
        sessions = data.get("sessions") if isinstance(data, dict) else None
        return sessions if isinstance(sessions, dict) else {}

    def _save(self, sessions: dict[str, dict[str, Any]]) -> None:
        """Save sessions to the JSON file atomically."""
        temp_path = self._path.with_suffix(".json.tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump({"sessions": sessions, "version": 1}, f, indent=2, ensure_ascii=False)
            # Atomic rename
            temp_path.replace(self._path)
        except OSError:
            if temp_path.exists():
                temp_path.unlink(missing_ok=True)
            raise

    @staticmethod
    def _serialize(record: SessionRecord) -> dict[str, Any]:
        return {
            "conversation_id": record.conversation_id,
            "created_at": record.created_at,
            "last_used": record.last_used,
        }

    @staticmethod
    def _deserialize(session_id: str, data: dict[str, Any]) -> SessionRecord:
        return SessionRecord(
            session_id=session_id,
            conversation_id=data.get("conversation_id"),
            created_at=data.get("created_at"),
            last_used=data.get("last_used"),
        )

    def get_or_create(self, session_id: str | None) -> SessionRecord:
        with self._lock:
            sessions = self._load()
            now = time.time()
            if session_id and session_id in sessions:
                sessions[session_id]["last_used"] = now
            else:
                session_id = session_id or uuid.uuid4().hex
                sessions[session_id] = {"conversation_id": None, "created_at": now, "last_used": now}
            self._save(sessions)
            return self._deserialize(session_id, sessions[session_id])

    def get(self, session_id: str) -> SessionRecord | None:
        with self._lock:
            data = self._load().get(session_id)
        return self._deserialize(session_id, data) if data is not None else None

    def bind(self, session_id: str, conversation_id: str | None) -> SessionRecord:
        with self._lock:
            sessions = self._load()
            now = time.time()
            data = sessions.setdefault(session_id, {"created_at": now})
            data["conversation_id"] = conversation_id
            data["last_used"] = now
            self._save(sessions)
            return self._deserialize(session_id, data)

    def touch(self, session_id: str) -> SessionRecord | None:
        with self._lock:
            sessions = self._load()
            data = sessions.get(session_id)
            if data is None:
                return None
            data["last_used"] = time.time()
            self._save(sessions)
            return self._deserialize(session_id, data)

    def delete(self, session_id: str) -> bool:
        with self._lock:
            sessions = self._load()
            if sessions.pop(session_id, None) is None:
                return False
            self._save(sessions)
            return True

    def purge_expired(self, max_age_seconds: float, now_ts: float | None = None) -> list[str]:
        now = now_ts if now_ts is not None else time.time()
        with self._lock:
            sessions = self._load()
            expired = [
                sid
                for sid, data in sessions.items()
                if now - (data.get("last_used") or data.get("created_at") or now) > max_age_seconds
            ]
            if expired:
                for sid in expired:
                    del sessions[sid]
                self._save(sessions)
        return expired
