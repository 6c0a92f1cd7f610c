from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        validate_assignment=True,
    )

    app_env: str = "dev"
    database_url: str
    log_level: str = "INFO"

    # Search engine (Elasticsearch/OpenSearch REST API)
    search_url: str
    search_username: str | None = None
    search_password: str | None = None
    search_api_key: str | None = None  # Sent as "Authorization: ApiKey <key>"
    search_artworks_index: str = "artworks"
    search_dry_run: bool = False  # When true: log index/delete calls instead of sending

    # Push delivery (FCM HTTP endpoint)
    fcm_server_key: str | None = None
    fcm_url: str = "https://fcm.googleapis.com/fcm/send"
    push_dry_run: bool = True  # Set to False in production to enable real sending

    # Feature flags
    feature_notifications_enabled: bool = True  # Push delivery (records are always written)
    feature_search_sync_enabled: bool = True  # Artwork index sync

    # Add the full lowercased string to generated keywords (users_artworks aggregate)
    keywords_include_full_text: bool = False

    system_event_retention_days: int = 90


# Settings will load from environment variables or .env file
# Required fields will raise ValidationError if missing (fail-fast)
settings = Settings()
