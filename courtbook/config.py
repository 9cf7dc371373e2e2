# courtbook/config.py

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    database_url: str = "sqlite:///./data/courtbook.db"
    redis_url: str | None = None

    admin_token: str = "change-me"
    timezone: str = "Africa/Cairo"

    site_config_base_path: Path = BASE_DIR / "config" / "site.base.json"
    site_config_override_path: Path = BASE_DIR / "config" / "site.override.json"

    expiry_check_interval: int = 60  # seconds between expiry sweeps
    create_tables: bool = True

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",
    )

    @property
    def resolved_database_url(self) -> str:
        url = self.database_url
        if url.startswith("sqlite:///./"):
            # relative sqlite path is anchored at the project root
            relative_path = url.replace("sqlite:///./", "")
            absolute_path = BASE_DIR / relative_path
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            return f"sqlite:///{absolute_path}"
        return url


settings = Settings()
