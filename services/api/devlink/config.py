"""
Configuration management using Pydantic BaseSettings.
All values can be overridden via environment variables or a .env file.

A single frozen ``Settings`` instance is built at startup by ``create_app``
and handed to every component that needs it; nothing reads configuration
from module globals.
"""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── TiDB / MySQL (document rows with JSON columns) ────────────────────
    tidb_host: str = "tidb"
    tidb_port: int = 4000
    tidb_user: str = "root"
    tidb_password: str = ""
    tidb_database: str = "devlink"
    # Full SQLAlchemy URL; takes precedence over the tidb_* parts when set.
    # e.g. sqlite+aiosqlite:///./devlink.db for local runs
    database_url: str = ""
    db_pool_size: int = 20
    db_max_overflow: int = 10

    @property
    def sqlalchemy_url(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"mysql+aiomysql://{self.tidb_user}:{self.tidb_password}"
            f"@{self.tidb_host}:{self.tidb_port}/{self.tidb_database}"
        )

    # ── Auth ───────────────────────────────────────────────────────────────
    jwt_secret_key: str = "change-me"
    jwt_algorithm: str = "HS256"
    jwt_expires_seconds: int = 360000    # 100 hours

    # ── Aggregate writes ───────────────────────────────────────────────────
    max_write_retries: int = 3           # optimistic-concurrency attempts

    # ── GitHub ─────────────────────────────────────────────────────────────
    github_api_url: str = "https://api.github.com"
    github_client_id: str = ""
    github_client_secret: str = ""
    github_timeout: float = 5.0

    # ── Observability ──────────────────────────────────────────────────────
    log_level: str = "INFO"
    otel_enabled: bool = False
    otel_exporter_otlp_endpoint: str = "http://jaeger:4317"
    service_name: str = "devlink-api"
    environment: str = "development"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        frozen = True
