from __future__ import annotations

import os
from pathlib import Path
from typing import List


class Settings:
    """Centralized configuration for the AyurTrack backend."""

    def __init__(self) -> None:
        base_dir = Path(__file__).resolve().parent
        repo_root = base_dir.parent

        self.env: str = (os.environ.get("APP_ENV") or "development").strip().lower()
        self.host: str = os.environ.get("HOST") or "127.0.0.1"
        self.port: int = int(os.environ.get("PORT") or "3001")
        self.log_level: str = (os.environ.get("LOG_LEVEL") or "INFO").upper()

        # ---- Document store ----
        self.document_backend: str = (os.environ.get("DOCUMENT_BACKEND") or "sqlite").strip().lower()
        self.db_path: Path = Path(
            os.environ.get("AYURTRACK_DB_PATH") or (repo_root / "data" / "ayurtrack.db")
        ).expanduser()
        # Raw JSON, not a path. Falls back to application default credentials when unset.
        self.firebase_service_account_key: str | None = os.environ.get("FIREBASE_SERVICE_ACCOUNT_KEY")
        self.firebase_project_id: str | None = os.environ.get("FIREBASE_PROJECT_ID")

        # ---- Cache ----
        self.redis_url: str = os.environ.get("REDIS_URL") or "redis://localhost:6379"

        # ---- Generative model (OpenAI-compatible chat/completions) ----
        self.ai_base_url: str = os.environ.get(
            "AI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta/openai"
        )
        self.ai_api_key: str | None = os.environ.get("AI_API_KEY")
        self.ai_model: str = os.environ.get("AI_MODEL", "gemini-1.5-pro")
        self.ai_timeout: float = float(os.environ.get("AI_TIMEOUT", "60"))
        self.ai_temperature: float = float(os.environ.get("AI_TEMPERATURE", "0.3"))
        self.ai_max_tokens: int = int(os.environ.get("AI_MAX_TOKENS", "2048"))
        self.ai_top_p: float = float(os.environ.get("AI_TOP_P", "0.8"))
        self.ai_rate_limit: int = int(os.environ.get("AI_RATE_LIMIT") or "30")
        self.ai_rate_window: int = int(os.environ.get("AI_RATE_WINDOW") or "60")

        cors = os.environ.get("FRONTEND_URL", "http://localhost:3000")
        if cors.strip() == "*":
            self.cors_origins: List[str] = ["*"]
        else:
            self.cors_origins = [
                origin.strip() for origin in cors.split(",") if origin.strip()
            ]

    @property
    def is_production(self) -> bool:
        return self.env == "production"


settings = Settings()
