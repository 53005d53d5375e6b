from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    SERVICE_HOST: str = "0.0.0.0"
    SERVICE_PORT: int = 8180
    MAX_EVENT_SIZE: int = 65536
    LOG_JSON: bool = True
    LOG_LEVEL: str = "INFO"
    # Read cache freshness window
    CACHE_TTL_SECONDS: float = 2.0
    DEFAULT_PAGE_SIZE: int = 10
    CORS_ALLOW_ORIGINS: str = "*"  # Comma-separated list of origins

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ALLOW_ORIGINS.split(",") if o.strip()]

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
