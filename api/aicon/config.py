"""Application configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_backend: str = "sqlite"  # sqlite or postgres
    sqlite_path: str = "./data/aicon.db"
    postgres_host: str = "postgres"
    postgres_port: int = 5432
    postgres_user: str = "aicon"
    postgres_password: str = "changeme"
    postgres_db: str = "aicon_db"

    # Storage
    storage_provider: str = "local"  # local or s3
    storage_root: str = "./data/storage"
    s3_endpoint_url: str = "https://nyc3.digitaloceanspaces.com"
    s3_region: str = "nyc3"
    s3_bucket: str = "a-icon"
    s3_access_key_id: str = ""
    s3_secret_access_key: str = ""
    s3_base_path: str = ""

    # Favicon pipeline
    default_asset_domain: str = "a-icon.com"
    dedup_policy: str = "always_create"  # always_create or reuse_existing

    # Request limits
    max_upload_bytes: int = 512 * 1024
    max_metadata_length: int = 256
    max_domain_length: int = 256

    # Admin
    admin_password: str = "changeme"
    admin_session_hours: int = 24

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_reload: bool = True

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"  # text or json

    # Environment
    environment: str = "development"

    @property
    def database_url(self) -> str:
        """Build database URL."""
        if self.database_backend.lower() == "postgres":
            return (
                f"postgresql://{self.postgres_user}:{self.postgres_password}"
                f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
            )
        return f"sqlite:///{self.sqlite_path}"


settings = Settings()
