from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "SPPU Exam Master"
    app_version: str = "0.1.0"
    app_description: str = "APIs for generating exam-ready model answers"
    cors_allow_origins: List[str] = ["*"]
    log_level: str = "INFO"

    storage_root: Path = Path("storage")
    export_dir: Path = storage_root / "exports"
    html_template_dir: Path = Path(__file__).resolve().parent.parent / "templates"

    openai_api_key: Optional[str] = None
    # Point at an OpenAI-compatible endpoint (e.g. Gemini) when set
    openai_base_url: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    openai_timeout_seconds: float = 120.0

    history_capacity: int = 20
    max_batch_questions: int = 20
    min_question_length: int = 6

    @property
    def history_path(self) -> Path:
        return self.storage_root / "history.json"

    @property
    def styles_path(self) -> Path:
        return self.storage_root / "custom_styles.json"

    @property
    def preferences_path(self) -> Path:
        return self.storage_root / "preferences.json"

    def ensure_directories(self) -> None:
        self.storage_root.mkdir(parents=True, exist_ok=True)
        self.export_dir.mkdir(parents=True, exist_ok=True)


settings = Settings()
settings.ensure_directories()
