from __future__ import annotations

import logging
from typing import Protocol

import httpx
import openai

from common import llm
from gatewaychat.config import GatewayConfig
from gatewaychat.errors import ConfigurationError, TransportError
from gatewaychat.request_builder import WireRequest

logger = logging.getLogger(__name__)


class Transport(Protocol):
    async def post(self, request: WireRequest) -> str: ...

    async def aclose(self) -> None: ...


class HttpxTransport:
    """POSTs the wire request as JSON and returns the raw response body."""

    def __init__(self, timeout_s: float = 60.0, client: httpx.AsyncClient | None = None):
        self.timeout_s = timeout_s
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout_s)
        return self._client

    async def post(self, request: WireRequest) -> str:
        logger.debug(f"POST {request.url} headers={request.redacted_headers()}")
        try:
            resp = await self.client.post(request.url, headers=request.headers, json=request.body)
        except httpx.RequestError as e:
            raise TransportError(f"Request to {request.url} failed: {e}") from e

        logger.debug(f"Response {resp.status_code} from {request.url}")
        if resp.status_code != 200:
            raise TransportError(
                f"Gateway returned HTTP {resp.status_code}", status_code=resp.status_code
            )
        return resp.text

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


class LiteLLMTransport:
    """Sends the shaped request through litellm's proxy route."""

    def __init__(self, timeout_s: float = 60.0):
        self.timeout_s = timeout_s

    async def post(self, request: WireRequest) -> str:
        body = request.body
        extra_body = None
        if "responseFormat" in body:
            extra_body = {"responseFormat": body["responseFormat"]}

        logger.debug(
            f"litellm proxy call to {request.base_url} headers={request.redacted_headers()}"
        )
        try:
            response = await llm.acompletion(
                model=body["model"],
                messages=body["messages"],
                api_base=request.base_url,
                api_key=request.gateway_key,
                temperature=body["temperature"],
                extra_headers=request.provider_headers or None,
                extra_body=extra_body,
                timeout=self.timeout_s,
            )
        except openai.APIError as e:
            status = getattr(e, "status_code", None)
            raise TransportError(f"Gateway call failed: {e}", status_code=status) from e

        logger.debug(f"litellm usage: {llm.usage_dict(response)}")
        return response.model_dump_json()

    async def aclose(self) -> None:
        return None


def build_transport(config: GatewayConfig) -> Transport:
    if config.transport == "httpx":
        return HttpxTransport(timeout_s=config.timeout_s)
    if config.transport == "litellm":
        return LiteLLMTransport(timeout_s=config.timeout_s)
    raise ConfigurationError(f"Unknown transport: {config.transport}")
