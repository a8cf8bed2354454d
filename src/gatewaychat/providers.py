from dataclasses import dataclass
from enum import Enum


class Provider(str, Enum):
    OPENAI = "openai"
    CLAUDE = "claude"
    DEEPSEEK = "deepseek"
    UNKNOWN = "unknown"

    @property
    def display_name(self) -> str:
        return PROVIDER_DISPLAY_NAMES[self]


PROVIDER_DISPLAY_NAMES = {
    Provider.OPENAI: "OpenAI",
    Provider.CLAUDE: "Claude",
    Provider.DEEPSEEK: "DeepSeek",
    Provider.UNKNOWN: "Unknown",
}

AUTH_HEADERS: dict[Provider, str | None] = {
    Provider.OPENAI: "X-OpenAI-Api-Key",
    Provider.CLAUDE: "X-Anthropic-Api-Key",
    Provider.DEEPSEEK: "X-DeepSeek-Api-Key",
    Provider.UNKNOWN: None,
}

# Order matters: the first matching substring wins.
CLASSIFICATION_RULES: tuple[tuple[str, Provider], ...] = (
    ("gpt", Provider.OPENAI),
    ("claude", Provider.CLAUDE),
    ("deepseek", Provider.DEEPSEEK),
)


@dataclass(frozen=True, slots=True)
class ProviderPolicy:
    provider: Provider
    requires_strict_alternation: bool = False
    supports_reasoning_request: bool = False
    auth_header_name: str | None = None


def classify_model(model_id: str) -> Provider:
    for needle, provider in CLASSIFICATION_RULES:
        if needle in model_id:
            return provider
    return Provider.UNKNOWN


def policy_for_model(model_id: str) -> ProviderPolicy:
    provider = classify_model(model_id)
    strict = "deepseek" in model_id
    reasoning = strict or "claude" in model_id
    return ProviderPolicy(
        provider=provider,
        requires_strict_alternation=strict,
        supports_reasoning_request=reasoning,
        auth_header_name=AUTH_HEADERS[provider],
    )
