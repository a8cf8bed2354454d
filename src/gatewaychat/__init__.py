from gatewaychat.config import EnvCredentials, GatewayConfig, StaticCredentials
from gatewaychat.errors import (
    ConfigurationError,
    DecodeError,
    EmptyResponseError,
    PipelineError,
    SessionBusyError,
    StaleSessionError,
    TransportError,
)
from gatewaychat.extractor import ExtractedResponse, extract_response
from gatewaychat.models import Message, Role, Session, ShapedMessage
from gatewaychat.normalizer import normalize
from gatewaychat.pipeline import ChatPipeline, SendState
from gatewaychat.providers import Provider, ProviderPolicy, classify_model, policy_for_model
from gatewaychat.request_builder import WireRequest, build_request
from gatewaychat.store import SessionStore

__all__ = [
    "ChatPipeline",
    "ConfigurationError",
    "DecodeError",
    "EmptyResponseError",
    "EnvCredentials",
    "ExtractedResponse",
    "GatewayConfig",
    "Message",
    "PipelineError",
    "Provider",
    "ProviderPolicy",
    "Role",
    "SendState",
    "Session",
    "SessionBusyError",
    "SessionStore",
    "ShapedMessage",
    "StaleSessionError",
    "StaticCredentials",
    "TransportError",
    "WireRequest",
    "build_request",
    "classify_model",
    "extract_response",
    "normalize",
    "policy_for_model",
]
