from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── App ─────────────────────────────────────
    APP_NAME: str = "AccessiScan"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    DEBUG: bool = False

    # ── Server ──────────────────────────────────
    HOST: str = "0.0.0.0"
    PORT: int = 3002
    API_PREFIX: str = "/api"

    # Browser front-end allowed to call the API
    CORS_ALLOWED_ORIGIN: str = "http://localhost:5173"

    # ── Browser ─────────────────────────────────
    CHROMEDRIVER_PATH: Optional[str] = None
    USE_WEBDRIVER_MANAGER: bool = False

    PAGE_LOAD_TIMEOUT: int = 30  # seconds, covers navigation and the idle wait
    NETWORK_IDLE_MS: int = 500
    NETWORK_IDLE_MAX_INFLIGHT: int = 2

    # ── axe-core ────────────────────────────────
    # Default is the bundle shipped with axe-selenium-python. PATH overrides it
    # with a local file; URL opts in to a one-time download.
    AXE_SCRIPT_PATH: Optional[str] = None
    AXE_SCRIPT_URL: Optional[str] = None
    AXE_DOWNLOAD_TIMEOUT: int = 20
    AXE_SCRIPT_TIMEOUT: int = 600

    # ── Logging ─────────────────────────────────
    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = str(Path(__file__).parent.parent.parent / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
