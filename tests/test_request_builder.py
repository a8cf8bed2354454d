import pytest

from gatewaychat.config import GatewayConfig, StaticCredentials
from gatewaychat.errors import ConfigurationError
from gatewaychat.models import Role, ShapedMessage
from gatewaychat.providers import policy_for_model
from gatewaychat.request_builder import REDACTED, build_request

MESSAGES = [ShapedMessage(Role.SYSTEM, "sys"), ShapedMessage(Role.USER, "hi")]


def test_body_for_openai_model(config, credentials):
    request = build_request(MESSAGES, "gpt-4o", policy_for_model("gpt-4o"), config, credentials)
    assert request.url == "http://gateway.local:4000/v1/chat/completions"
    assert request.body == {
        "model": "gpt-4o",
        "messages": [
            {"role": "system", "content": "sys"},
            {"role": "user", "content": "hi"},
        ],
        "temperature": 0.7,
    }
    assert "responseFormat" not in request.body


@pytest.mark.parametrize("model_id", ["claude-3-5-sonnet", "deepseek-reasoner"])
def test_reasoning_hint_for_reasoning_models(config, credentials, model_id):
    request = build_request(MESSAGES, model_id, policy_for_model(model_id), config, credentials)
    assert request.body["responseFormat"] == {"type": "json", "includeReasoning": True}
    assert request.body["model"] == model_id


def test_gateway_and_provider_headers(config, credentials):
    request = build_request(
        MESSAGES, "claude-3-5-sonnet", policy_for_model("claude-3-5-sonnet"), config, credentials
    )
    assert request.headers == {
        "Content-Type": "application/json",
        "Authorization": "Bearer sk-gateway",
        "X-Anthropic-Api-Key": "sk-claude",
    }
    assert request.provider_headers == {"X-Anthropic-Api-Key": "sk-claude"}
    assert request.gateway_key == "sk-gateway"


def test_missing_keys_omit_headers(config):
    credentials = StaticCredentials({"openai": ""})
    request = build_request(MESSAGES, "gpt-4o", policy_for_model("gpt-4o"), config, credentials)
    assert request.headers == {"Content-Type": "application/json"}
    assert request.gateway_key is None


def test_unknown_provider_gets_only_gateway_header(config, credentials):
    request = build_request(
        MESSAGES, "mistral-large", policy_for_model("mistral-large"), config, credentials
    )
    assert set(request.headers) == {"Content-Type", "Authorization"}


def test_trailing_slash_is_stripped(credentials):
    config = GatewayConfig(base_url="https://gw.example.com/")
    request = build_request(MESSAGES, "gpt-4o", policy_for_model("gpt-4o"), config, credentials)
    assert request.url == "https://gw.example.com/v1/chat/completions"


@pytest.mark.parametrize("base_url", ["", "   ", "ftp://gw.example.com", "http://"])
def test_bad_base_url_is_a_configuration_error(credentials, base_url):
    config = GatewayConfig(base_url=base_url)
    with pytest.raises(ConfigurationError):
        build_request(MESSAGES, "gpt-4o", policy_for_model("gpt-4o"), config, credentials)


def test_redacted_headers_hide_secrets(config, credentials):
    request = build_request(
        MESSAGES, "deepseek-chat", policy_for_model("deepseek-chat"), config, credentials
    )
    redacted = request.redacted_headers()
    assert redacted["Authorization"] == REDACTED
    assert redacted["X-DeepSeek-Api-Key"] == REDACTED
    assert redacted["Content-Type"] == "application/json"
