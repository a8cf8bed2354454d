import warnings
from typing import Any

import litellm
from litellm import acompletion as litellm_acompletion

warnings.filterwarnings("ignore", message="Pydantic serializer warnings")
litellm.drop_params = True

PROXY_PREFIX = "litellm_proxy/"


def proxy_model(model: str) -> str:
    """Route a gateway model id through litellm's proxy provider."""
    if model.startswith(PROXY_PREFIX):
        return model
    return f"{PROXY_PREFIX}{model}"


async def acompletion(
    model: str,
    messages: list[dict],
    api_base: str,
    api_key: str | None = None,
    temperature: float = 0.7,
    extra_headers: dict[str, str] | None = None,
    extra_body: dict[str, Any] | None = None,
    timeout: float | None = None,
    **kwargs,
) -> Any:
    params = {
        "model": proxy_model(model),
        "messages": messages,
        "temperature": temperature,
        "api_base": api_base,
        **kwargs,
    }

    if api_key:
        params["api_key"] = api_key
    if extra_headers:
        params["extra_headers"] = extra_headers
    if extra_body:
        params["extra_body"] = extra_body
    if timeout is not None:
        params["timeout"] = timeout

    return await litellm_acompletion(**params)


def usage_dict(response: Any) -> dict:
    usage = getattr(response, "usage", None)
    return {
        "prompt_tokens": int(getattr(usage, "prompt_tokens", 0) or 0),
        "completion_tokens": int(getattr(usage, "completion_tokens", 0) or 0),
        "total_tokens": int(getattr(usage, "total_tokens", 0) or 0),
    }
