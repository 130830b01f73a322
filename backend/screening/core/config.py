from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from pathlib import Path

# Find the backend directory (where .env is located)
BACKEND_DIR = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(BACKEND_DIR / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    # API Settings
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Surrogacy Candidate Screening"

    # CORS
    FRONTEND_URL: str = "http://localhost:3000"
    ALLOWED_ORIGINS: Optional[str] = None  # comma separated

    # Logging
    LOG_LEVEL: str = "INFO"

    # Cascade escalation
    # Layer 3 runs only below this confidence, when the caller opts in with a credential
    ESCALATION_CONFIDENCE_THRESHOLD: float = 60.0
    EXTERNAL_EXTRACTION_TIMEOUT_SECONDS: float = 20.0
    EXTERNAL_EXTRACTION_PROVIDER: str = "groq"  # "groq" or "gemini"

    # Groq
    GROQ_MODEL: str = "llama-3.1-8b-instant"

    # Google Gemini
    GEMINI_MODEL: str = "gemini-2.0-flash"


settings = Settings()
