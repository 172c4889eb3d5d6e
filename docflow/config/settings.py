from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "localhost"
    db_port: int = 5432
    db_database: str = "docflow"
    db_username: str = "docflow"
    db_password: str = "secret"
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10

    pdf_engine: str = "pymupdf"
    scan_min_chars_per_page: int = 100
    ocr_max_pages: int = 10
    ocr_render_scale: float = 2.0
    ocr_document_type: str = "general"

    ai_provider: str = "openai"
    ai_api_key: str = ""
    ai_base_url: str = ""
    ai_timeout_seconds: int = 60

    structuring_model: str = "gpt-4o-mini"
    structuring_temperature: float = 0.2
    structuring_max_tokens: int = 8000
    structuring_max_input_chars: int = 12000
    structuring_min_chars: int = 50
    structuring_require_full_coverage: bool = True

    ocr_model: str = "gpt-4o-mini"
    ocr_batch_size: int = 5
    transcription_model: str = "whisper-1"

    ai_plans: str = "pro,team-pro,enterprise,business,premium"
    activity_window: int = 80

    def ai_plan_names(self) -> frozenset[str]:
        """Plan names entitled to AI structuring, lowercased."""
        return frozenset(
            name.strip().lower() for name in self.ai_plans.split(",") if name.strip()
        )
