from __future__ import annotations

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Provider settings loaded from environment variables or .env file.

    The five ``BITBUCKET_*`` credential variables are the documented
    environment fallbacks for the provider's configuration attributes; an
    explicit attribute value always takes precedence over its variable.
    """

    BITBUCKET_USERNAME: str = ""
    BITBUCKET_PASSWORD: SecretStr = SecretStr("")
    BITBUCKET_OAUTH_CLIENT_ID: str = ""
    BITBUCKET_OAUTH_CLIENT_SECRET: SecretStr = SecretStr("")
    BITBUCKET_OAUTH_TOKEN: SecretStr = SecretStr("")

    BITBUCKET_BASE_URL: str = "https://api.bitbucket.org/"
    BITBUCKET_TOKEN_URL: str = "https://bitbucket.org/site/oauth2/access_token"
    BITBUCKET_REQUEST_TIMEOUT: float = 30.0
    BITBUCKET_MAX_RESPONSE_BYTES: int = 10 * 1024 * 1024
    BITBUCKET_TOKEN_EXPIRY_LEEWAY: int = 30

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    def fallback_for(self, key: str) -> str:
        """Return the plaintext environment fallback for configuration *key*.

        Unknown keys resolve to an empty string.
        """
        value = getattr(self, f"BITBUCKET_{key.upper()}", "")
        if isinstance(value, SecretStr):
            return value.get_secret_value()
        return value or ""
