from __future__ import annotations

import threading
import time
import uuid
from dataclasses import replace

from vetfinder.application.ports.session_store import SessionStorePort
from vetfinder.domain.entities.session import SessionRecord


class MemorySessionStore(SessionStorePort):
    def __init__(self) -> None:
        self._sessions: dict[str, SessionRecord] = {}
        self._lock = threading.Lock()

    def get_or_create(self, session_id: str | None) -> SessionRecord:
        with self._lock:
            if session_id and session_id in self._sessions:
                record = replace(self._sessions[session_id], last_used=time.time())
            else:
                now = time.time()
                record = SessionRecord(
                    session_id=session_id or uuid.uuid4().hex,
                    created_at=now,
                    last_used=now,
                )
            self._sessions[record.session_id] = record
            return record

    def get(self, session_id: str) -> SessionRecord | None:
        return self._sessions.get(session_id)

    def bind(self, session_id: str, conversation_id: str | None) -> SessionRecord:
        record = self.get_or_create(session_id)
        with self._lock:
            record = replace(record, conversation_id=conversation_id)
            self._sessions[session_id] = record
            return record

    def touch(self, session_id: str) -> SessionRecord | None:
        with self._lock:
            record = self._sessions.get(session_id)
            if record is None:
                return None
            record = replace(record, last_used=time.time())
            self._sessions[session_id] = record
            return record

    def delete(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def purge_expired(self, max_age_seconds: float, now_ts: float | None = None) -> list[str]:
        now = now_ts if now_ts is not None else time.time()
        with self._lock:
            expired = [
                sid
                for sid, record in self._sessions.items()
                if now - (record.last_used or record.created_at or now) > max_age_seconds
            ]
            for sid in expired:
                del self._sessions[sid]
        return expired
