import json
import logging
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from gatewaychat.errors import DecodeError, EmptyResponseError

logger = logging.getLogger(__name__)


class CompletionMessage(BaseModel):
    role: str
    content: str
    reasoning: str | None = None
    reasoning_content: str | None = None


class CompletionChoice(BaseModel):
    message: CompletionMessage
    index: int | None = None
    finish_reason: str | None = None


class CompletionUsage(BaseModel):
    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    total_tokens: int | None = None


class CompletionPayload(BaseModel):
    choices: list[CompletionChoice]
    usage: CompletionUsage | None = None
    reasoning: str | None = None
    reasoning_content: str | None = None


@dataclass(frozen=True, slots=True)
class ExtractedResponse:
    answer: str
    reasoning: str | None = None
    usage: CompletionUsage | None = None
    finish_reason: str | None = None


def decode_body(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        logger.debug(f"Undecodable response body: {text!r}")
        raise DecodeError(f"Response body is not valid JSON: {e.msg}", raw_body=text) from e


def pick_reasoning(payload: CompletionPayload) -> str | None:
    message = payload.choices[0].message
    # In-message before top-level, primary field before the alternate one.
    for candidate in (
        message.reasoning,
        payload.reasoning,
        message.reasoning_content,
        payload.reasoning_content,
    ):
        if candidate is not None:
            return candidate
    return None


def extract_response(payload: Any, raw_body: str | None = None) -> ExtractedResponse:
    try:
        parsed = CompletionPayload.model_validate(payload)
    except ValidationError as e:
        raw = raw_body if raw_body is not None else json.dumps(payload, default=str)
        logger.debug(f"Unexpected response shape: {raw}")
        raise DecodeError(
            f"Response did not match the chat completion shape ({e.error_count()} errors)",
            raw_body=raw,
        ) from e

    if not parsed.choices:
        raise EmptyResponseError("No response received")

    first = parsed.choices[0]
    if not first.message.content.strip():
        raise EmptyResponseError("Response contained an empty answer")

    return ExtractedResponse(
        answer=first.message.content,
        reasoning=pick_reasoning(parsed),
        usage=parsed.usage,
        finish_reason=first.finish_reason,
    )


def extract_body(text: str) -> ExtractedResponse:
    return extract_response(decode_body(text), raw_body=text)
