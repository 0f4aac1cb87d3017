from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "postgresql+asyncpg://postgres:postgres@db:5432/tableside"
    log_level: str = "INFO"
    log_json: bool = True

    # Connection pool
    db_pool_size: int = 10
    db_max_overflow: int = 5
    db_statement_timeout_ms: int = 5000

    # Restaurant
    table_count: int = 20
    seed_menu: bool = True

    # Observability (tracing is disabled when unset)
    otlp_endpoint: str | None = None

    model_config = {"env_file": ".env"}


settings = Settings()
