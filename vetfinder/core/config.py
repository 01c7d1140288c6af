from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    VETFINDER_API_URL: str | None = None
    VETFINDER_API_TOKEN: str | None = None
    HTTP_TIMEOUT_SECONDS: float = 30.0

    NOMINATIM_BASE_URL: str = "https://nominatim.openstreetmap.org"
    NOMINATIM_USER_AGENT: str = "VetFinder/1.0 (contact@vetfinder.ro)"
    GEOCODING_ENABLED: bool = True

    SESSION_STORE_PATH: str = "./data/sessions.json"
    SESSION_MAX_AGE_SECONDS: int = 24 * 60 * 60

    MIN_PHOTOS: int = 4
    MAX_PHOTOS: int = 10


settings = Settings()
