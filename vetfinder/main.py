import logging

from fastapi import FastAPI

from vetfinder.api.v1.reference import router as reference_router
from vetfinder.api.v1.wizard import router as wizard_router
from vetfinder.core.config import settings

class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in ("wizard_id", "step", "company_id", "stage", "status", "path", "reason"):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


handler = logging.StreamHandler()
handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

root = logging.getLogger()
root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
root.handlers.clear()
root.addHandler(handler)

app = FastAPI(title="VetFinder Clinic Onboarding", version="1.0.0")

app.include_router(reference_router, tags=["reference"])
app.include_router(wizard_router, tags=["wizards"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
