from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8000
    debug: bool = False
    session_secret_key: str
    cors_origins: list[str] = []
    forwarded_allow_ips: str = "127.0.0.1"  # Proxies trusted for X-Forwarded-For
    secure_cookies: bool = False  # Set to true when served over HTTPS
    admin_email: str = "admin@blogsmith.local"  # Default admin account created on startup
    admin_password: str = "admin123"
    llm_model: str = "gpt-4o"  # litellm model name used for title generation
    llm_api_key: str = ""
    rephrasy_api_url: str = "https://v1-humanizer.rephrasy.ai/api"
    rephrasy_api_key: str = ""
    rephrasy_model: str = "Undetectable Model"
    usd_to_inr_rate: float = 83.0
    # Workflow session coalescing
    workflow_window_minutes: int = 30  # Steps within this window share one workflow session id
    workflow_max_age_minutes: int = 60  # Coalescer entries older than this are pruned
    workflow_prune_interval_seconds: int = 300  # 0 disables the background prune task
    # Build metadata injected during Docker build via environment variables
    git_commit_hash: str = "unknown"
    build_time: str = "unknown"

    model_config = {
        "env_file": [".env"],
        "env_prefix": "BLOGSMITH_",
        "extra": "ignore",
    }
