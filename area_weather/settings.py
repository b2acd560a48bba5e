from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized configuration.

    Loaded from:
    - environment variables (e.g. WEATHERAPI_KEY)
    - .env file (if present)
    """
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Required key (the app should fail fast if missing)
    weatherapi_key: str

    weatherapi_base_url: str = "https://api.weatherapi.com/v1"
    request_timeout_s: float = 30.0

    # Upper bound on simultaneous per-point forecast requests.
    # 1 makes the area fan-out strictly sequential.
    max_point_concurrency: int = 4

    app_name: str = "Area Weather API"

    log_level: str = "INFO"
    log_json: bool = True


settings = Settings()
