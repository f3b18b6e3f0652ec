"""Centralized configuration and logging setup."""
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv


# Constants
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./synapse.db"
DEFAULT_LLM_PROVIDER = "gemini"
DEFAULT_LLM_TIMEOUT = 30.0
SUPPORTED_PROVIDERS = ("gemini", "openai", "rules")


def setup_logging(level: str | None = None, format_str: str | None = None) -> None:
    """
    Setup centralized logging configuration.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_str: Log message format
    """
    log_level = (level or os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL)).upper()
    log_format = format_str or os.getenv("LOG_FORMAT", DEFAULT_LOG_FORMAT)

    logging.basicConfig(
        format=log_format,
        level=getattr(logging, log_level, logging.INFO),
        datefmt=DEFAULT_LOG_DATE_FORMAT,
        force=True,  # Override any existing configuration
    )

    logger = logging.getLogger(__name__)
    logger.info("Logging configured: level=%s", log_level)


class Config:
    """Application configuration with validation."""

    def __init__(self):
        """Initialize configuration from environment variables."""
        # Load .env file if it exists
        env_path = Path.cwd() / ".env"
        if env_path.exists():
            load_dotenv(env_path)

        # Required settings
        self.jwt_secret = self._get_required("JWT_SECRET")
        self.jwt_algorithm = os.getenv("JWT_ALGORITHM", "HS256")

        # Storage
        self.database_url = os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)

        # LLM settings
        self.llm_provider = os.getenv("LLM_PROVIDER", DEFAULT_LLM_PROVIDER).strip().lower()
        self.llm_timeout = self._parse_float("LLM_TIMEOUT", DEFAULT_LLM_TIMEOUT)
        self.gemini_api_key = os.getenv("GEMINI_API_KEY")
        self.gemini_model = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")
        self.openai_base_url = os.getenv("OPENAI_BASE_URL", "http://localhost:11434/v1")
        self.openai_api_key = os.getenv("OPENAI_API_KEY")
        self.openai_model = os.getenv("OPENAI_MODEL", "llama3.2")

        # HTTP settings
        self.frontend_origins = self._parse_origins(os.getenv("FRONTEND_URL", "*"))
        self.host = os.getenv("HOST", "0.0.0.0")
        self.port = int(self._parse_float("PORT", 3000))

        # Logging
        self.log_level = os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()

    def _get_required(self, key: str) -> str:
        """Get required environment variable or exit."""
        value = os.getenv(key)
        if not value:
            print(f"ERROR: Required environment variable {key} not set", file=sys.stderr)
            print(f"Please set {key} in your .env file or environment", file=sys.stderr)
            sys.exit(1)
        return value

    def _parse_float(self, key: str, default: float) -> float:
        """Parse a numeric environment variable, falling back to the default."""
        raw = os.getenv(key)
        if raw is None or not raw.strip():
            return default
        try:
            return float(raw)
        except ValueError:
            logging.getLogger(__name__).error(f"Invalid {key} value: {raw!r}, using {default}")
            return default

    def _parse_origins(self, origins_str: str) -> list[str]:
        """Parse comma-separated CORS origins."""
        origins = [origin.strip() for origin in origins_str.split(",") if origin.strip()]
        return origins or ["*"]

    def validate(self) -> list[str]:
        """
        Validate configuration.

        Returns:
            List of validation warnings (empty if all OK)
        """
        warnings = []

        if self.llm_provider not in SUPPORTED_PROVIDERS:
            warnings.append(
                f"Unknown LLM_PROVIDER {self.llm_provider!r}, expected one of {', '.join(SUPPORTED_PROVIDERS)}"
            )

        if self.llm_provider == "gemini" and not self.gemini_api_key:
            warnings.append("LLM_PROVIDER=gemini but GEMINI_API_KEY is not set")

        if self.llm_provider == "openai" and not self.openai_base_url.startswith("http"):
            warnings.append(f"OPENAI_BASE_URL should start with http:// or https://: {self.openai_base_url}")

        if self.llm_timeout <= 0:
            warnings.append(f"LLM_TIMEOUT must be positive, got {self.llm_timeout}")

        if "*" in self.frontend_origins:
            warnings.append("FRONTEND_URL not restricted - API accepts requests from any origin")

        return warnings

    def __repr__(self) -> str:
        """String representation (hiding sensitive data)."""
        return (
            f"Config(jwt_secret=*****, "
            f"database_url={self.database_url.split('@')[-1]}, "
            f"llm_provider={self.llm_provider}, "
            f"llm_timeout={self.llm_timeout}, "
            f"gemini_model={self.gemini_model}, "
            f"openai_base_url={self.openai_base_url}, "
            f"openai_model={self.openai_model}, "
            f"frontend_origins={self.frontend_origins})"
        )


def load_config() -> Config:
    """Load and validate configuration."""
    config = Config()

    logger = logging.getLogger(__name__)
    logger.info(f"Configuration loaded: {config}")

    warnings = config.validate()
    for warning in warnings:
        logger.warning(warning)

    return config
