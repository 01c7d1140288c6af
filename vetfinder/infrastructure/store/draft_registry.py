from __future__ import annotations

import threading
import time

from vetfinder.application.use_cases.wizard import CompanyWizard


class WizardRegistry:
    """Live wizards by id. Drafts are never persisted; a restart loses them."""

    def __init__(self) -> None:
        self._wizards: dict[str, CompanyWizard] = {}
        self._last_used: dict[str, float] = {}
        self._lock = threading.Lock()

    def add(self, wizard: CompanyWizard) -> CompanyWizard:
        with self._lock:
            self._wizards[wizard.wizard_id] = wizard
            self._last_used[wizard.wizard_id] = time.time()
        return wizard

    def get(self, wizard_id: str) -> CompanyWizard | None:
        with self._lock:
            wizard = self._wizards.get(wizard_id)
            if wizard is not None:
                self._last_used[wizard_id] = time.time()
            return wizard

    def remove(self, wizard_id: str) -> CompanyWizard | None:
        with self._lock:
            self._last_used.pop(wizard_id, None)
            return self._wizards.pop(wizard_id, None)

    def purge_expired(self, max_age_seconds: float, now_ts: float | None = None) -> list[str]:
        """Drop wizards untouched for longer than max_age_seconds, cancelling their requests."""
        now = now_ts if now_ts is not None else time.time()
        with self._lock:
            expired = [wid for wid, used in self._last_used.items() if now - used > max_age_seconds]
            for wid in expired:
                del self._last_used[wid]
                self._wizards.pop(wid).cancellation.cancel("wizard expired")
        return expired

    def __len__(self) -> int:
        return len(self._wizards)
