from abc import ABC, abstractmethod

from vetfinder.domain.entities.session import SessionRecord


class SessionStorePort(ABC):
    @abstractmethod
    def get_or_create(self, session_id: str | None) -> SessionRecord:
        raise NotImplementedError

    @abstractmethod
    def get(self, session_id: str) -> SessionRecord | None:
        raise NotImplementedError

    @abstractmethod
    def bind(self, session_id: str, conversation_id: str | None) -> SessionRecord:
        """Attach (or detach, with None) the wizard id for a session."""
        raise NotImplementedError

    @abstractmethod
    def touch(self, session_id: str) -> SessionRecord | None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, session_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def purge_expired(self, max_age_seconds: float, now_ts: float | None = None) -> list[str]:
        """Remove sessions unused for longer than max_age_seconds. Returns the removed ids."""
        raise NotImplementedError
