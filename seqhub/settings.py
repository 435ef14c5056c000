from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings for the fetch worker, API client and state store.

    Values are read from process environment and optionally from `.env`.
    Credentials are never part of settings; they arrive per fetch request.
    """

    github_graphql_url: str = "https://api.github.com/graphql"
    request_timeout_seconds: float = 20.0
    poll_interval_seconds: float = 0.05
    user_agent: str = "seqhub"
    database_url: str = "sqlite+pysqlite:///./seqhub.db"
    state_key: str = "default"
    log_level: str = "INFO"
    sentry_dsn: str | None = None
    environment: str = "development"
    release: str | None = None
    sentry_traces_sample_rate: float = 0.1

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
