from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="DIFFSET_", env_ignore_empty=True)

    repo_path: Path | None = None  # None: repository containing the cwd
    git_binary: str = "git"
    git_timeout: int = 20
    context_lines: int = 3
    find_renames: bool = True

    log_level: str = "INFO"


settings = Settings()
