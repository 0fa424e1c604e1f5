"""
Client Configuration

Pydantic models for the credentials and request policy shared by every
resource client derived from one root, plus helpers for reading the same
options from the environment.
"""

import logging
import os
from typing import Any, Dict, Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    ValidationError,
    field_validator,
)

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_IDENTIFIER = "NameAPI (Python)"
DEFAULT_URL = "https://www.name.com"
ENV_PREFIX = "NAME_API"

CREDENTIAL_OPTIONS = frozenset({"user", "apiuser", "token", "apitoken"})
CREDENTIAL_ALIASES = {"apiuser": "user", "apitoken": "token"}
POLICY_OPTIONS = frozenset({"debug", "fatal", "retries", "timeout", "retry_backoff"})
ENV_OPTIONS = (
    "user", "token", "identifier", "version",
    "debug", "fatal", "retries", "timeout", "retry_backoff", "url",
)


class Credentials(BaseModel):
    """Account holder's API user and token"""

    model_config = ConfigDict(frozen=True, extra="forbid")

    user: str = Field(min_length=1, validation_alias=AliasChoices("user", "apiuser"))
    token: SecretStr = Field(validation_alias=AliasChoices("token", "apitoken"))

    @field_validator("token")
    @classmethod
    def token_not_empty(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value():
            raise ValueError("token must not be empty")
        return v


class RequestPolicy(BaseModel):
    """
    Per-request behaviour.

    retries counts additional attempts after the first one; 0 means a single
    attempt. retry_backoff is the base delay for exponential backoff between
    attempts, 0 retries immediately.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    debug: bool = False
    fatal: bool = False
    retries: int = Field(default=0, ge=0)
    timeout: int = Field(default=10, gt=0)
    retry_backoff: float = Field(default=0.0, ge=0)

    def backoff_delay(self, attempt: int) -> float:
        """Seconds to wait before retrying after the given 0-based attempt"""
        if not self.retry_backoff:
            return 0.0
        return self.retry_backoff * (2 ** attempt)


class ClientConfig(BaseModel):
    """Complete configuration shared by value across derived clients"""

    model_config = ConfigDict(frozen=True, extra="forbid")

    credentials: Credentials
    policy: RequestPolicy = RequestPolicy()
    identifier: str = Field(default=DEFAULT_IDENTIFIER, min_length=1)
    # Kept for compatibility, request paths never include it
    version: int = Field(default=1, ge=1)
    url: str = DEFAULT_URL

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("url must start with http:// or https://")
        return v.rstrip("/")

    @classmethod
    def from_options(cls, **options: Any) -> "ClientConfig":
        """
        Build a configuration from flat construction options

        Args:
            options: user/apiuser, token/apitoken, identifier, version, debug,
                fatal, retries, timeout, retry_backoff, url

        Raises:
            ConfigurationError: If a required credential is missing, is given
                under both of its names, or any option has the wrong shape
        """
        conflicts = {
            alias: f"conflicts with '{name}', pass only one of them"
            for alias, name in CREDENTIAL_ALIASES.items()
            if alias in options and name in options
        }
        if conflicts:
            logger.error(f"Conflicting credential options: {conflicts}")
            pairs = [f"{alias} and {CREDENTIAL_ALIASES[alias]} both given" for alias in sorted(conflicts)]
            raise ConfigurationError(
                f"Invalid client configuration: {', '.join(pairs)}",
                field_errors=conflicts,
            )

        credential_options = {k: v for k, v in options.items() if k in CREDENTIAL_OPTIONS}
        policy_options = {k: v for k, v in options.items() if k in POLICY_OPTIONS}
        other_options = {
            k: v for k, v in options.items()
            if k not in CREDENTIAL_OPTIONS and k not in POLICY_OPTIONS
        }

        try:
            return cls(
                credentials=Credentials(**credential_options),
                policy=RequestPolicy(**policy_options),
                **other_options,
            )
        except ValidationError as e:
            field_errors = {
                ".".join(str(part) for part in error["loc"]) or "options": error["msg"]
                for error in e.errors()
            }
            logger.error(f"Invalid client configuration: {field_errors}")
            raise ConfigurationError(
                f"Invalid client configuration: {', '.join(sorted(field_errors))}",
                field_errors=field_errors,
            ) from e


def load_options_from_env(prefix: str = ENV_PREFIX,
                          dotenv_path: Optional[str] = None) -> Dict[str, str]:
    """
    Read client options from environment variables

    Variable naming convention is {PREFIX}_{OPTION}, e.g. NAME_API_USER,
    NAME_API_TOKEN, NAME_API_RETRIES. A .env file is loaded first without
    overriding variables that are already set.

    Returns:
        Dictionary of the options found, values left as strings
    """
    load_dotenv(dotenv_path or find_dotenv(usecwd=True))

    options = {}
    for option in ENV_OPTIONS:
        env_var_name = f"{prefix}_{option.upper()}"
        value = os.getenv(env_var_name)
        if value:
            options[option] = value
            logger.debug(f"Found option {option} in env var {env_var_name}")

    if not options:
        logger.debug(f"No client options found in environment (checked prefix: {prefix}_*)")
    return options
