from pydantic_settings import BaseSettings, SettingsConfigDict


class ConsoleSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="DIVULGA_CONSOLE_", env_file=".env", extra="ignore")

    api_base_url: str = "http://localhost:8000"
    request_timeout_seconds: float = 10.0
    page_size: int = 30


console_settings = ConsoleSettings()
