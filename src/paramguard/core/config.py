# paramguard/src/paramguard/core/config.py

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Archive store location; relative paths resolve against the working directory
    db_path: str = Field(default="paramguard.db")
    default_retention_days: int = Field(default=30, ge=0)
    log_level: str = Field(default="INFO")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "PARAMGUARD_",
        "extra": "ignore"
    }

    def build_database_url(self) -> str:
        return build_database_url(self.db_path)


def build_database_url(db_path) -> str:
    """Return the SQLAlchemy URL for a sqlite store file (or ':memory:')."""
    if str(db_path) == ":memory:":
        return "sqlite://"
    return f"sqlite:///{Path(db_path)}"


# Instantiate settings
settings = Settings()

DB_PATH = settings.db_path
DEFAULT_RETENTION_DAYS = settings.default_retention_days
