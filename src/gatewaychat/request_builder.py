from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import httpx

from gatewaychat.config import GATEWAY_CREDENTIAL, CredentialLookup, GatewayConfig
from gatewaychat.errors import ConfigurationError
from gatewaychat.models import ShapedMessage
from gatewaychat.providers import ProviderPolicy

CHAT_COMPLETIONS_PATH = "/v1/chat/completions"
TEMPERATURE = 0.7
REDACTED = "********"


@dataclass(frozen=True, slots=True)
class WireRequest:
    base_url: str
    headers: dict[str, str]
    body: dict[str, Any]
    path: str = CHAT_COMPLETIONS_PATH
    provider_headers: dict[str, str] = field(default_factory=dict)

    @property
    def url(self) -> str:
        return f"{self.base_url}{self.path}"

    @property
    def gateway_key(self) -> str | None:
        auth = self.headers.get("Authorization", "")
        if auth.startswith("Bearer "):
            return auth[len("Bearer "):]
        return None

    def redacted_headers(self) -> dict[str, str]:
        redacted = {}
        for key, value in self.headers.items():
            lowered = key.lower()
            if lowered == "authorization" or "api-key" in lowered:
                redacted[key] = REDACTED
            else:
                redacted[key] = value
        return redacted


def resolve_base_url(config: GatewayConfig) -> str:
    base_url = (config.base_url or "").strip().rstrip("/")
    if not base_url:
        raise ConfigurationError("Gateway base URL is not configured")
    try:
        url = httpx.URL(base_url)
    except httpx.InvalidURL as e:
        raise ConfigurationError(f"Gateway base URL is invalid: {base_url}") from e
    if url.scheme not in ("http", "https") or not url.host:
        raise ConfigurationError(f"Gateway base URL must be http(s): {base_url}")
    return base_url


def build_body(
    messages: Sequence[ShapedMessage], model_id: str, policy: ProviderPolicy
) -> dict[str, Any]:
    body: dict[str, Any] = {
        "model": model_id,
        "messages": [m.to_wire() for m in messages],
        "temperature": TEMPERATURE,
    }
    if policy.supports_reasoning_request:
        body["responseFormat"] = {"type": "json", "includeReasoning": True}
    return body


def build_headers(
    policy: ProviderPolicy, credentials: CredentialLookup
) -> tuple[dict[str, str], dict[str, str]]:
    headers = {"Content-Type": "application/json"}
    gateway_key = credentials.get(GATEWAY_CREDENTIAL)
    if gateway_key:
        headers["Authorization"] = f"Bearer {gateway_key}"

    provider_headers: dict[str, str] = {}
    if policy.auth_header_name:
        provider_key = credentials.get(policy.provider.value)
        if provider_key:
            provider_headers[policy.auth_header_name] = provider_key
    headers.update(provider_headers)
    return headers, provider_headers


def build_request(
    messages: Sequence[ShapedMessage],
    model_id: str,
    policy: ProviderPolicy,
    config: GatewayConfig,
    credentials: CredentialLookup,
) -> WireRequest:
    base_url = resolve_base_url(config)
    headers, provider_headers = build_headers(policy, credentials)
    return WireRequest(
        base_url=base_url,
        headers=headers,
        body=build_body(messages, model_id, policy),
        provider_headers=provider_headers,
    )
