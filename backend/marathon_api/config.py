"""
Marathon Event API — Application Configuration
================================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by the app factory; handed to services through app.state.
When:  Loaded once at module import time; validated in the lifespan before
       the store connection is opened.

Connection string resolution:
    1. MONGODB_URI, when set, is used verbatim.
    2. DB_USER + DB_PASS build a mongodb+srv:// URI against MONGODB_CLUSTER_HOST.
    3. Otherwise a local mongod (mongodb://localhost:27017) is assumed.
"""

from typing import List
from urllib.parse import quote_plus

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

DEFAULT_CORS_ORIGINS = ",".join(
    [
        "http://localhost:5173",
        "https://marathon-event.web.app",
        "https://marathon-event.firebaseapp.com",
    ]
)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have defaults suitable for local development.
    Production deployments MUST provide ACCESS_TOKEN_SECRET and either
    MONGODB_URI or DB_USER/DB_PASS.
    """

    # ── Deployment ────────────────────────────────────────────────────────
    # "production" switches the session cookie to Secure + SameSite=None
    environment: str = Field(default="development")

    # ── MongoDB ───────────────────────────────────────────────────────────
    mongodb_uri: str = Field(default="", description="Full MongoDB connection URI")
    db_user: str = Field(default="")
    db_pass: str = Field(default="")
    mongodb_cluster_host: str = Field(default="cluster0.fh7he.mongodb.net")
    mongodb_app_name: str = Field(default="Cluster0")
    mongodb_database: str = Field(default="marathonDB")

    # Stable API v1 with strict + deprecation errors
    mongodb_strict_api: bool = Field(default=True)

    # Bounds the startup ping so an unreachable cluster fails fast
    mongodb_server_selection_timeout_ms: int = Field(default=5000, ge=100, le=60000)

    # ── Session Token ─────────────────────────────────────────────────────
    access_token_secret: str = Field(default="", description="HS256 signing secret")
    token_expire_days: int = Field(default=100, ge=1, le=365)

    # Comma-separated route names that require a valid session cookie,
    # on top of the routes flagged as protected in the route table.
    protected_routes: str = Field(default="")

    # ── Registrations ─────────────────────────────────────────────────────
    # Wrap insert + counter increment in a multi-document transaction.
    # Requires a replica set or sharded cluster.
    use_transactions: bool = Field(default=False)

    # Decrement the marathon counter when a registration is deleted.
    decrement_on_registration_delete: bool = Field(default=False)

    # ── Marathons ─────────────────────────────────────────────────────────
    upcoming_sample_size: int = Field(default=6, ge=1, le=100)

    # ── CORS ──────────────────────────────────────────────────────────────
    cors_origins: str = Field(default=DEFAULT_CORS_ORIGINS)

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def protected_routes_set(self) -> set:
        return {name.strip() for name in self.protected_routes.split(",") if name.strip()}

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def mongodb_connection_uri(self) -> str:
        """
        What: Resolves the connection string from the MongoDB settings.
        How:  Explicit URI first, then Atlas SRV credentials, then localhost.
        """
        if self.mongodb_uri:
            return self.mongodb_uri
        if self.db_user and self.db_pass:
            return (
                f"mongodb+srv://{quote_plus(self.db_user)}:{quote_plus(self.db_pass)}"
                f"@{self.mongodb_cluster_host}/"
                f"?retryWrites=true&w=majority&appName={self.mongodb_app_name}"
            )
        return "mongodb://localhost:27017"

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    port: int = Field(default=5000, ge=1, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    def validate_required_for_production(self) -> None:
        """
        What:  Validates that critical settings are configured.
        When:  Called during app startup (lifespan).
        How:   Collects every problem and raises a single ValueError.
        """
        errors = []
        if self.is_production:
            if not self.access_token_secret:
                errors.append("ACCESS_TOKEN_SECRET is not set.")
            if not self.mongodb_uri and not (self.db_user and self.db_pass):
                errors.append("Set MONGODB_URI or both DB_USER and DB_PASS.")
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance; create_app() accepts an override for tests
settings = Settings()
