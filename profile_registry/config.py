from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Centralized registry settings leveraging environment overrides.
    """

    app_name: str = "Character Profile Registry"
    profiles_dir: Path = Field(
        Path("profiles"), description="Directory holding one file per profile"
    )
    profile_suffix: str = Field(".yaml", pattern=r"^\.[A-Za-z0-9_-]+$")
    log_level: str = Field("INFO", description="Level for the package logger")
    log_file: Optional[str] = Field(None, description="Optional log file path")

    class Config:
        env_prefix = "PROFILE_REGISTRY_"
        env_file = ".env"
        case_sensitive = False


@lru_cache
def get_settings() -> Settings:
    return Settings()
