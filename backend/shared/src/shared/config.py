"""Application settings loaded once at startup.

Provider secrets are mandatory. The loader reports every missing secret in a
single ConfigurationError so the process refuses to start instead of failing
on the first webhook.

Usage:
    from shared.config import load_settings

    settings = load_settings()
"""

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from shared.services.ssm_service import SSMService, get_ssm_service
from shared.utils.logging import get_logger

logger = get_logger(__name__)

REQUIRED_SECRETS: tuple[str, ...] = (
    "JWT_SECRET",
    "PAYSTACK_SECRET_KEY",
    "STRIPE_SECRET_KEY",
    "STRIPE_WEBHOOK_SECRET",
)

DEFAULT_DATABASE_URL = "sqlite:///./layback.db"


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""

    def __init__(self, message: str, missing: list[str] | None = None) -> None:
        super().__init__(message)
        self.missing = missing or []


class Settings(BaseModel):
    """Runtime configuration for the API process."""

    model_config = ConfigDict(frozen=True)

    environment: str = "development"
    log_level: str = "INFO"

    jwt_secret: SecretStr
    paystack_secret_key: SecretStr
    stripe_secret_key: SecretStr
    stripe_webhook_secret: SecretStr
    stripe_webhook_tolerance: int = Field(default=300, gt=0)

    database_url: str = DEFAULT_DATABASE_URL
    db_pool_size: int = Field(default=10, gt=0)
    db_max_overflow: int = Field(default=0, ge=0)
    db_pool_timeout: float = Field(default=15.0, gt=0)

    upload_dir: str = "public/uploads"
    max_upload_bytes: int = Field(default=5 * 1024 * 1024, gt=0)

    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


def _read_secrets(
    environ: Mapping[str, str],
    ssm: SSMService | None,
) -> dict[str, str | None]:
    source = environ.get("SECRETS_SOURCE", "env").lower()
    if source == "env":
        return {name: environ.get(name) or None for name in REQUIRED_SECRETS}
    if source == "ssm":
        environment = environ.get("ENVIRONMENT", "development")
        service = ssm or get_ssm_service()
        return service.get_secrets(environment, list(REQUIRED_SECRETS))
    raise ConfigurationError(f"Unknown SECRETS_SOURCE: {source!r} (expected 'env' or 'ssm')")


def load_settings(
    environ: Mapping[str, str] | None = None,
    *,
    ssm: SSMService | None = None,
) -> Settings:
    """Build Settings from the environment.

    Args:
        environ: Mapping to read from. Defaults to os.environ.
        ssm: SSM service used when SECRETS_SOURCE=ssm.

    Returns:
        Validated Settings.

    Raises:
        ConfigurationError: If any required secret is missing or a value is invalid.
    """
    env = os.environ if environ is None else environ
    secrets = _read_secrets(env, ssm)

    missing = [name for name in REQUIRED_SECRETS if not secrets.get(name)]
    if missing:
        for name in missing:
            logger.critical("Missing required configuration: %s", name)
        raise ConfigurationError(
            f"Missing required configuration: {', '.join(missing)}",
            missing=missing,
        )

    values: dict[str, object] = {name.lower(): value for name, value in secrets.items()}

    optional = {
        "ENVIRONMENT": "environment",
        "LOG_LEVEL": "log_level",
        "STRIPE_WEBHOOK_TOLERANCE": "stripe_webhook_tolerance",
        "DATABASE_URL": "database_url",
        "DB_POOL_SIZE": "db_pool_size",
        "DB_MAX_OVERFLOW": "db_max_overflow",
        "DB_POOL_TIMEOUT": "db_pool_timeout",
        "UPLOAD_DIR": "upload_dir",
        "MAX_UPLOAD_BYTES": "max_upload_bytes",
    }
    for env_name, field_name in optional.items():
        if env.get(env_name):
            values[field_name] = env[env_name]

    origins = env.get("CORS_ALLOW_ORIGINS")
    if origins:
        values["cors_allow_origins"] = [o.strip() for o in origins.split(",") if o.strip()]

    try:
        return Settings.model_validate(values)
    except ValueError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
