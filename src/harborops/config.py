from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str  # MongoDB URL, the path component names the database
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 3000
    debug: bool = False
    cors_origins: list[str] = []
    default_page_limit: int = 50  # Page size for list endpoints when limit is omitted
    max_page_limit: int = 500
    max_grouped_rows: int = 5000  # Rows fetched before grouping in memory
    preset_cache_ttl: float = 0.0  # Seconds a finished preset list fetch is reused (0 = only while in flight)

    model_config = {
        "env_file": [".env"],
        "env_prefix": "HARBOROPS_",
        "extra": "ignore",
    }
