from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Language-understanding backend (OpenAI-compatible). Both must be set for delegated mode.
    ai_integrations_openai_base_url: str | None = None
    ai_integrations_openai_api_key: str | None = None
    ai_command_model: str = "gpt-5"
    ai_command_max_tokens: int = 500
    ai_command_timeout: float = 30.0

    # HTTP client timeouts (seconds)
    dash_http_connect_timeout: float = 5.0

    # Telemetry push
    dash_broadcast_interval: float = 5.0
    dash_reconnect_delay: float = 3.0

    # Host telemetry probe (NVML + disk usage)
    dash_telemetry_probe_enabled: bool = False
    dash_telemetry_probe_interval: float = 15.0

    # Repository
    dash_event_log_limit: int = 50
    dash_offload_freed_gb: float = 200.0
    dash_seed_data: bool = True

    # Logging
    dash_log_level: str = "info"

    # CORS
    dash_cors_origins: str = "http://localhost:5000"

    model_config = {"env_prefix": "", "case_sensitive": False, "env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def ai_configured(self) -> bool:
        return bool(self.ai_integrations_openai_base_url and self.ai_integrations_openai_api_key)


settings = Settings()
