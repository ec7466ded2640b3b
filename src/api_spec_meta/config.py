"""Settings read from the environment or a .env file."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="API_SPEC_META_", env_file=".env", extra="ignore")

    # Type graph
    depth: int = 4
    nested_suffixes: list[str] = ["Form", "Body", "Bean", "Result", "Part"]

    # Document
    title: str = "api"
    base_path: str = "/"
    schemes: list[str] = ["http"]
    default_form_http_method: str = "get"

    # Scalar formatting (strftime, %L = milliseconds)
    date_pattern: str = "%Y-%m-%d"
    datetime_pattern: str = "%Y-%m-%dT%H:%M:%S.%L"
    time_pattern: str = "%H:%M:%S.%L"

    # Diff
    content_charset: str = "utf-8"


def get_settings() -> Settings:
    return Settings()
