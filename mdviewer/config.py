from __future__ import annotations

import os
from dotenv import load_dotenv
from pydantic import BaseModel

# Load environment variables from .env (if present)
load_dotenv()


class Settings(BaseModel):
    # Directory scanned for markdown documents
    workspace_root: str = os.getenv("MDVIEWER_ROOT", os.getcwd())

    # Optional API key for the HTTP routes (sent via X-API-Key header)
    api_key: str = os.getenv("MDVIEWER_API_KEY", "")

    # CORS origins (comma-separated or "*")
    cors_origins: str = os.getenv("CORS_ORIGINS", "*")

    log_level: str = os.getenv("MDVIEWER_LOG_LEVEL", "INFO")

    # HTML page theme: "light" or "dark"
    css_theme: str = os.getenv("MDVIEWER_THEME", "light")


settings = Settings()
