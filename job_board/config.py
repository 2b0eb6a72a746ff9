from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # App
    app_name: str = "LaborExchange"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    # Backend REST API
    api_base_url: str = "http://localhost:8080"
    api_timeout_seconds: float = 15.0

    # Session cookie that holds the bearer token and flash messages
    session_secret: str = "change-me"
    session_cookie: str = "job_board_session"

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    # Listing
    page_size: int = 10
    dashboard_page_size: int = 5

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
