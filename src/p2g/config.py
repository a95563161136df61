from pathlib import Path
from typing import Optional

from pydantic import BaseModel
from pydantic_settings import BaseSettings


class FormatSettings(BaseModel):
    """Which output file formats the converter should produce."""

    raw_json: bool = False
    tcx: bool = True
    fit: bool = False  # binary FIT encoding is not supported; logged and skipped

    class Config:
        frozen = True


class Settings(BaseSettings):
    peloton_email: str = ""
    peloton_password: str = ""
    peloton_num_workouts: int = 5  # default cursor for scheduled syncs
    garmin_upload: bool = True
    garmin_tokens_dir: Path = Path.home() / ".p2g" / "garmin_session"
    output_directory: Path = Path("./output")
    database_url: str = "sqlite:///./p2g.db"
    check_for_updates: bool = True
    github_repo: str = "philosowaffle/peloton-to-garmin"
    sync_interval_hours: int = 1
    format: FormatSettings = FormatSettings()

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_nested_delimiter = "__"
        frozen = True

    @property
    def download_directory(self) -> Path:
        return self.output_directory / "downloaded"

    @property
    def working_directory(self) -> Path:
        return self.output_directory / "working"

    @property
    def upload_directory(self) -> Path:
        return self.output_directory / "upload"


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


class SettingsService:
    """
    Hands the sync run its Settings snapshot.

    With a pinned snapshot every call returns it, so the run sees the same
    directories its collaborators were built with. Without one, every call
    loads fresh Settings from the environment.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self._settings = settings

    async def get_settings(self) -> Settings:
        if self._settings is not None:
            return self._settings
        return Settings()
