from __future__ import annotations

import os
from pathlib import Path
from typing import List


class Settings:
    """Centralized configuration for the Sprout backend."""

    def __init__(self) -> None:
        base_dir = Path(__file__).resolve().parent
        repo_root = base_dir.parent
        data_root_default = repo_root / "data"

        # ---- Storage ----
        self.data_root: Path = Path(
            os.environ.get("SPROUT_DATA_ROOT") or data_root_default
        ).expanduser()

        # ---- Default user (single-user deployments) ----
        self.default_user_id: str | None = (os.environ.get("SPROUT_DEFAULT_USER_ID") or "").strip() or None
        self.default_sprout_name: str | None = (os.environ.get("SPROUT_DEFAULT_SPROUT_NAME") or "").strip() or None

        # ---- LLM (OpenAI-compatible chat completions) ----
        self.llm_api_key: str | None = os.environ.get("GEMINI_API_KEY") or os.environ.get("LLM_API_KEY")
        self.llm_base_url: str = os.environ.get(
            "LLM_BASE_URL", "https://generativelanguage.googleapis.com/v1beta/openai"
        )
        self.llm_model: str = os.environ.get("LLM_MODEL", "gemini-2.0-flash")
        self.llm_timeout: float = float(os.environ.get("LLM_TIMEOUT", "30"))
        self.llm_temperature: float = float(os.environ.get("LLM_TEMPERATURE", "0.4"))
        self.llm_max_tokens: int = int(os.environ.get("LLM_MAX_TOKENS", "2048"))

        # ---- OCR (vision model) ----
        self.ocr_model: str = (os.environ.get("OCR_MODEL") or "").strip() or self.llm_model
        self.ocr_timeout: float = float(os.environ.get("OCR_TIMEOUT", "60"))

        self.max_upload_mb: int = int(os.environ.get("SPROUT_MAX_UPLOAD_MB") or "10")

        cors = os.environ.get("SPROUT_CORS_ORIGINS", "*")
        if cors.strip() == "*":
            self.cors_origins: List[str] = ["*"]
        else:
            self.cors_origins = [
                origin.strip() for origin in cors.split(",") if origin.strip()
            ]

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


settings = Settings()
