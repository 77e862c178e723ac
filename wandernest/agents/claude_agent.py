from collections.abc import Iterator

import anthropic

from wandernest.models import ChatMessage
from .base import ConciergeAgent, conversation_turns

DEFAULT_MODEL = "claude-sonnet-4-5"


class ClaudeAgent(ConciergeAgent):
    """Concierge backed by the Anthropic Messages API."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        max_tokens: int = 1024,
        client: anthropic.Anthropic | None = None,
    ):
        super().__init__(api_key)
        self.model = model
        self.max_tokens = max_tokens
        self.client = client or anthropic.Anthropic(api_key=api_key)

    @property
    def name(self) -> str:
        return "Claude"

    @property
    def model_id(self) -> str:
        return self.model

    def chat(self, message: str, history: list[ChatMessage]) -> Iterator[str]:
        request = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "system": self.system_prompt,
            "messages": conversation_turns(message, history),
        }
        with self.client.messages.stream(**request) as stream:
            yield from stream.text_stream
