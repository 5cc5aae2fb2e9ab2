"""SSM Parameter Store access for provider secrets.

Used when the service runs with SECRETS_SOURCE=ssm instead of reading the
payment gateway secrets from environment variables.
"""

from functools import lru_cache

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from shared.utils.logging import get_logger

logger = get_logger(__name__)

PARAMETER_PREFIX = "/layback"


class SSMServiceError(Exception):
    """Raised when SSM parameter retrieval fails."""


def parameter_path(environment: str, name: str) -> str:
    """Build the SSM path for a secret.

    Args:
        environment: Deployment environment (development, production, ...)
        name: Environment-variable style secret name, e.g. PAYSTACK_SECRET_KEY

    Returns:
        Path such as /layback/production/paystack_secret_key
    """
    return f"{PARAMETER_PREFIX}/{environment}/{name.lower()}"


class SSMService:
    """Reads SecureString parameters with in-process caching."""

    def __init__(self, region_name: str | None = None) -> None:
        self._client = boto3.client("ssm", region_name=region_name)
        self._cache: dict[str, str] = {}

    def get_parameter(self, name: str, *, use_cache: bool = True) -> str:
        """Retrieve a decrypted parameter value.

        Args:
            name: Full parameter path
            use_cache: Whether to use cached value if available (default: True)

        Returns:
            The decrypted parameter value.

        Raises:
            SSMServiceError: If the parameter cannot be retrieved.
        """
        if use_cache and name in self._cache:
            logger.debug("SSM cache hit for %s", name)
            return self._cache[name]

        try:
            logger.info("Fetching SSM parameter: %s", name)
            response = self._client.get_parameter(Name=name, WithDecryption=True)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code == "ParameterNotFound":
                raise SSMServiceError(f"SSM parameter not found: {name}") from e
            if error_code == "AccessDeniedException":
                raise SSMServiceError(
                    f"Access denied to SSM parameter: {name}. "
                    "Check IAM permissions for ssm:GetParameter."
                ) from e
            raise SSMServiceError(f"Failed to retrieve SSM parameter {name}: {e}") from e
        except BotoCoreError as e:
            raise SSMServiceError(f"Failed to retrieve SSM parameter {name}: {e}") from e

        value: str = response["Parameter"]["Value"]
        self._cache[name] = value
        return value

    def get_secrets(self, environment: str, names: list[str]) -> dict[str, str | None]:
        """Fetch several secrets for an environment.

        Missing parameters map to None so the caller can report all of them
        at once.
        """
        secrets: dict[str, str | None] = {}
        for name in names:
            path = parameter_path(environment, name)
            try:
                secrets[name] = self.get_parameter(path)
            except SSMServiceError as e:
                logger.warning("Secret %s unavailable from SSM: %s", name, e)
                secrets[name] = None
        return secrets

    def clear_cache(self) -> None:
        """Clear all cached parameters."""
        self._cache.clear()
        logger.info("SSM parameter cache cleared")


@lru_cache(maxsize=1)
def get_ssm_service() -> SSMService:
    """Get the shared SSMService instance."""
    return SSMService()
