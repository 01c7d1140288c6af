from dataclasses import dataclass


@dataclass(frozen=True)
class SessionRecord:
    session_id: str
    conversation_id: str | None = None  # wizard id bound to this session
    created_at: float | None = None
    last_used: float | None = None
