from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Providers, comma-separated; order is routing priority for duplicate model ids.
    # API keys are read per provider from {PROVIDER}_API_KEY, not from here.
    enabled_providers: str = "openai"

    @property
    def enabled_provider_names(self) -> list[str]:
        return [p.strip().lower() for p in self.enabled_providers.split(",") if p.strip()]

    # App
    app_env: str = "development"
    app_debug: bool = True
    app_host: str = "0.0.0.0"
    app_port: int = 8081

    # CORS
    allowed_origins: str = "*"  # comma-separated, e.g. "https://app.example.com,https://admin.example.com"

    # Logging
    log_level: str = "INFO"
    log_json: bool = False  # set True in production for structured JSON logs

    # Sentry
    sentry_dsn: str = ""  # leave empty to disable


settings = Settings()


def validate_settings_for_production() -> None:
    """Validate critical settings. Called on startup."""
    from llm_gateway.gateway.vendor_adapters import ADAPTER_REGISTRY

    errors: list[str] = []

    providers = settings.enabled_provider_names
    if not providers:
        errors.append("ENABLED_PROVIDERS must name at least one provider")

    unknown = [p for p in providers if p not in ADAPTER_REGISTRY]
    if unknown:
        errors.append(
            f"ENABLED_PROVIDERS has unknown providers: {', '.join(unknown)} "
            f"(available: {', '.join(ADAPTER_REGISTRY)})"
        )

    if settings.app_env == "production":
        if settings.allowed_origins == "*":
            errors.append("ALLOWED_ORIGINS must not be '*' in production")
        if settings.app_debug:
            errors.append("APP_DEBUG must be false in production")

    if errors:
        raise SystemExit("Configuration errors:\n  - " + "\n  - ".join(errors))
