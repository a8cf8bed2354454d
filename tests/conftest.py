import os

# Use litellm's bundled model cost map instead of fetching it over the
# network at import time (the fetch can hang/deadlock offline).
os.environ.setdefault("LITELLM_LOCAL_MODEL_COST_MAP", "True")

import pytest

from gatewaychat.config import GatewayConfig, StaticCredentials
from gatewaychat.models import Session


@pytest.fixture
def config(tmp_path) -> GatewayConfig:
    return GatewayConfig(
        base_url="http://gateway.local:4000",
        default_model="gpt-4o",
        data_dir=str(tmp_path),
        transport="httpx",
    )


@pytest.fixture
def credentials() -> StaticCredentials:
    return StaticCredentials(
        {
            "gateway": "sk-gateway",
            "openai": "sk-openai",
            "claude": "sk-claude",
            "deepseek": "sk-deepseek",
        }
    )


@pytest.fixture
def session() -> Session:
    return Session(model_id="gpt-4o")
