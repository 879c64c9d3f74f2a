import functools

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Config(BaseSettings):
    API_BASE_URL: str = "http://localhost:8080/api/v1"
    API_TIMEOUT: float = 15.0
    REDIS_DSN: str = "redis://localhost:6379/0"
    LOG_LEVEL: str = "INFO"

    @field_validator("API_BASE_URL")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


@functools.lru_cache
def get_config() -> Config:
    return Config()


config = get_config()
