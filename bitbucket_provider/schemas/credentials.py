from __future__ import annotations

from pydantic import BaseModel, ConfigDict, SecretStr

from bitbucket_provider.models.enums import AuthMode

# ---------------------------------------------------------------------------
# Provider configuration schema
# ---------------------------------------------------------------------------


class ConfigField(BaseModel):
    """One attribute of the provider's own configuration schema."""

    model_config = ConfigDict(frozen=True)

    name: str
    env_var: str
    secret: bool = False
    description: str = ""
    conflicts_with: tuple[str, ...] = ()
    required_with: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Resolved credentials
# ---------------------------------------------------------------------------


class Credentials(BaseModel):
    """The single authentication variant selected for a provider instance.

    Only the fields belonging to ``mode`` are populated.  Secret fields are
    :class:`~pydantic.SecretStr` so that ``repr`` and model dumps never
    expose them.
    """

    model_config = ConfigDict(frozen=True)

    mode: AuthMode
    username: str | None = None
    password: SecretStr | None = None
    client_id: str | None = None
    client_secret: SecretStr | None = None
    token: SecretStr | None = None

    def secret_values(self) -> list[str]:
        """Return every literal secret this credential carries.

        Used to build the log redaction filter; empty values are skipped.
        """
        values: list[str] = []
        for secret in (self.password, self.client_secret, self.token):
            if secret is not None and secret.get_secret_value():
                values.append(secret.get_secret_value())
        return values

