import json

from gatewaychat.models import Message, Role


def completion_body(
    content: str = "Hello!",
    *,
    reasoning: str | None = None,
    top_level_reasoning: str | None = None,
    reasoning_content: str | None = None,
    top_level_reasoning_content: str | None = None,
) -> str:
    message = {"role": "assistant", "content": content}
    if reasoning is not None:
        message["reasoning"] = reasoning
    if reasoning_content is not None:
        message["reasoning_content"] = reasoning_content
    payload = {
        "choices": [{"index": 0, "finish_reason": "stop", "message": message}],
        "usage": {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
    }
    if top_level_reasoning is not None:
        payload["reasoning"] = top_level_reasoning
    if top_level_reasoning_content is not None:
        payload["reasoning_content"] = top_level_reasoning_content
    return json.dumps(payload)


def make_history(*turns: tuple[str, str]) -> list[Message]:
    return [Message(role=Role(role), content=content) for role, content in turns]


class FakeTransport:
    def __init__(self, body: str | None = None, error: Exception | None = None):
        self.body = body if body is not None else completion_body()
        self.error = error
        self.requests = []
        self.closed = False

    async def post(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.body

    async def aclose(self):
        self.closed = True
