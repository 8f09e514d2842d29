from pydantic import ConfigDict, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Self-test defaults
    default_algorithm: str = "SHA-256"
    default_backend: str = "reference-sha256-only"
    default_exponent: int = 5  # max number 10^5

    # Accepted exponent range for API callers (the engine takes any positive exponent)
    min_exponent: int = 1
    max_exponent: int = 10

    # Rate Limiting
    rate_limit_solves: str = "10/minute"

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"  # "json" in production

    # CORS
    cors_origins: list[str] | str = ["http://localhost:5173", "http://127.0.0.1:5173"]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v


settings = Settings()
