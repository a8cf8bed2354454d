import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol

from gatewaychat.errors import ConfigurationError

logger = logging.getLogger(__name__)

TRANSPORTS = ("httpx", "litellm")

GATEWAY_CREDENTIAL = "gateway"

CREDENTIAL_ENV_VARS = {
    GATEWAY_CREDENTIAL: "GATEWAY_API_KEY",
    "openai": "OPENAI_API_KEY",
    "claude": "ANTHROPIC_API_KEY",
    "deepseek": "DEEPSEEK_API_KEY",
}


def get_optional_env(name: str, default: str) -> str:
    return os.environ.get(name, default)


class CredentialLookup(Protocol):
    def get(self, name: str) -> str | None: ...


class EnvCredentials:
    def __init__(self, env_vars: Mapping[str, str] | None = None):
        self.env_vars = dict(env_vars or CREDENTIAL_ENV_VARS)

    def get(self, name: str) -> str | None:
        var = self.env_vars.get(name)
        if var is None:
            return None
        return os.environ.get(var) or None


class StaticCredentials:
    def __init__(self, values: Mapping[str, str] | None = None):
        self._values = dict(values or {})

    def get(self, name: str) -> str | None:
        return self._values.get(name) or None


@dataclass
class GatewayConfig:
    base_url: str = field(default_factory=lambda: get_optional_env("GATEWAY_BASE_URL", ""))
    default_model: str = field(
        default_factory=lambda: get_optional_env("GATEWAY_DEFAULT_MODEL", "gpt-4o")
    )
    timeout_s: float = 60.0
    data_dir: str = field(
        default_factory=lambda: get_optional_env("GATEWAY_DATA_DIR", "data/chat")
    )
    transport: str = field(
        default_factory=lambda: get_optional_env("GATEWAY_TRANSPORT", "httpx")
    )

    @classmethod
    def from_env(cls) -> "GatewayConfig":
        raw_timeout = get_optional_env("GATEWAY_TIMEOUT_SECONDS", "60")
        try:
            timeout_s = float(raw_timeout)
        except ValueError as e:
            raise ConfigurationError(
                f"GATEWAY_TIMEOUT_SECONDS must be a number, got {raw_timeout!r}"
            ) from e
        return cls(timeout_s=timeout_s)

    def validate(self) -> None:
        if self.timeout_s <= 0:
            raise ConfigurationError("timeout_s must be > 0")
        if self.transport not in TRANSPORTS:
            raise ConfigurationError(
                f"transport must be one of {', '.join(TRANSPORTS)}, got {self.transport!r}"
            )
        logger.info("Configuration validated successfully")
