"""Application configuration using Pydantic Settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # System Configuration
    api_prefix: str = "/api"
    debug: bool = False
    environment: str = "development"
    cors_origins: str = "http://localhost:8080,http://127.0.0.1:8080"
    rate_limit_enabled: bool = True

    # MongoDB Configuration
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_server_selection_timeout_ms: int = 5000
    auth_database: str = "todo-auth"
    todo_database: str = "todo-app"

    # Token Configuration
    jwt_secret: str = "your-secret-key-change-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expires_in_hours: int = 24
    password_min_length: int = 6

    # Auth Service (consumed by the todo service)
    auth_service_url: str = "http://localhost:3001"
    auth_service_timeout_seconds: float = 5.0

    # Logging Configuration
    log_level: str = "INFO"
    logstash_enabled: bool = False
    logstash_host: str = "localhost"
    logstash_port: int = 5044
    logstash_timeout_seconds: float = 5.0
    log_queue_size: int = 1000

    # Client Configuration
    todo_api_url: str = "http://localhost:3000"
    client_timeout_seconds: float = 10.0

    @property
    def logstash_url(self) -> str:
        """Collector endpoint for shipped log records."""
        return f"http://{self.logstash_host}:{self.logstash_port}"


settings = Settings()
