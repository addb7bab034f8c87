"""
Configuration management for IntentGuard.
Handles environment variables, the optional config.yaml and default settings.
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from .loader import expand_env, load_config

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_REGION = "mypurecloud.de"


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Config:
    """Configuration class for the IntentGuard service."""

    # Platform / session configuration
    default_region: str = os.getenv("DEFAULT_REGION", DEFAULT_REGION)
    session_ttl_hours: float = float(os.getenv("SESSION_TTL_HOURS", "24"))
    session_cleanup_interval_seconds: int = int(os.getenv("SESSION_CLEANUP_INTERVAL", "300"))
    validate_tokens: bool = _env_flag("VALIDATE_TOKENS")
    platform_timeout: float = float(os.getenv("PLATFORM_TIMEOUT", "10"))

    # HTTP front door
    allowed_origins: Optional[List[str]] = None
    cookie_secure: bool = os.getenv("ENVIRONMENT", "development") == "production"
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Batch testing
    batch_max_concurrency: int = int(os.getenv("BATCH_MAX_CONCURRENCY", "1"))
    results_output_dir: str = os.getenv("RESULTS_OUTPUT_DIR", os.path.join("data", "test-results"))

    # LLM configuration (any OpenAI-compatible endpoint, Groq by default)
    llm_provider: str = os.getenv("LLM_PROVIDER", "groq")
    llm_api_url: str = os.getenv("LLM_API_URL", "https://api.groq.com/openai/v1")
    llm_api_key: Optional[str] = os.getenv("GROQ_API_KEY") or os.getenv("LLM_API_KEY")
    llm_model_id: str = os.getenv("LLM_MODEL_ID", "llama-3.3-70b-versatile")
    llm_config: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        """Post-initialization setup."""
        if self.allowed_origins is None:
            origins = os.getenv("ALLOWED_ORIGINS") or os.getenv("FRONTEND_URL", "http://localhost:3000")
            self.allowed_origins = [o.strip() for o in origins.split(",") if o.strip()]

        if self.llm_config is None:
            self.llm_config = {
                "temperature": 0.7,
                "max_tokens": 4000,
            }

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from environment variables."""
        return cls()

    @classmethod
    def from_yaml(cls, config_path: str = "config.yaml") -> "Config":
        """
        Create configuration from environment defaults overlaid with a YAML file.

        Missing file means environment only. Sections: server, auth, platform,
        batch, llm.
        """
        if not os.path.exists(config_path):
            logger.info(f"[Config] {config_path} not found, using environment only")
            return cls.from_env()

        raw = expand_env(load_config(config_path))
        server = raw.get("server", {}) or {}
        auth = raw.get("auth", {}) or {}
        platform = raw.get("platform", {}) or {}
        batch = raw.get("batch", {}) or {}
        llm = raw.get("llm", {}) or {}

        overrides: Dict[str, Any] = {
            "allowed_origins": server.get("allowed_origins"),
            "cookie_secure": server.get("cookie_secure"),
            "log_level": server.get("log_level"),
            "default_region": auth.get("default_region"),
            "session_ttl_hours": auth.get("session_ttl_hours"),
            "validate_tokens": auth.get("validate_tokens"),
            "platform_timeout": platform.get("timeout"),
            "batch_max_concurrency": batch.get("max_concurrency"),
            "results_output_dir": batch.get("results_output_dir"),
            "llm_provider": llm.get("provider"),
            "llm_api_url": llm.get("api_url"),
            "llm_api_key": llm.get("api_key"),
            "llm_model_id": llm.get("model_id"),
        }
        if "temperature" in llm or "max_tokens" in llm:
            overrides["llm_config"] = {
                "temperature": float(llm.get("temperature", 0.7)),
                "max_tokens": int(llm.get("max_tokens", 4000)),
            }

        config = cls(**{key: value for key, value in overrides.items() if value not in (None, "")})
        # An empty key in YAML should not hide the one from the environment
        if not config.llm_api_key:
            config.llm_api_key = os.getenv("GROQ_API_KEY") or os.getenv("LLM_API_KEY")
        return config

    def validate(self) -> bool:
        """Validate configuration."""
        required_fields = ["default_region", "results_output_dir"]

        for field in required_fields:
            if not getattr(self, field):
                raise ValueError(f"Configuration field '{field}' is required")

        if self.batch_max_concurrency < 1:
            raise ValueError("Configuration field 'batch_max_concurrency' must be >= 1")

        return True

    def log_config(self, log: logging.Logger = logger):
        """Log current configuration (hiding sensitive data)."""
        log.info(f"[Config] Default region: {self.default_region}")
        log.info(f"[Config] Results directory: {self.results_output_dir}")
        log.info(f"[Config] Session TTL: {self.session_ttl_hours}h, token validation: {self.validate_tokens}")
        log.info(f"[Config] Batch concurrency: {self.batch_max_concurrency}")
        log.info(f"[Config] LLM: {self.llm_provider} / {self.llm_model_id} @ {self.llm_api_url}")
        log.info(f"[Config] LLM API key: {'set' if self.llm_api_key else 'missing'}")
