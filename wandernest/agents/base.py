from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator

from wandernest.models import ChatMessage, DestinationRecord

logger = logging.getLogger(__name__)

SYSTEM_PROMPT_TEMPLATE = """You are WanderNest AI Concierge, an expert travel assistant.

IMPORTANT RESTRICTIONS:
- You ONLY help with travel-related queries. This includes destinations, itineraries, packing, accommodations, flights, local culture, food, safety, budgets, visas, weather, and transportation.
- If a user asks about ANYTHING unrelated to travel, politely decline and redirect them to travel topics.

WHAT YOU HELP WITH:
- Destination recommendations based on preferences, budget, and travel style
- Custom itinerary planning and adjustments
- Travel tips, safety advice, and local insights
- Activity suggestions and hidden gems
- Weather considerations and best times to visit

{catalog_context}

RESPONSE STYLE:
- Always be friendly, helpful, and provide specific, actionable travel advice
- When suggesting destinations or activities, include practical details like estimated costs, duration, and insider tips
- Format responses with clear sections when providing detailed information
{language_instruction}"""

DEFAULT_CATALOG_CONTEXT = "Recommend destinations from your general travel knowledge."

FALLBACK_REPLY = (
    "I'm having trouble reaching my travel knowledge right now. "
    "Please try again in a moment, or browse the destinations page in the meantime."
)


def build_catalog_context(destinations: Iterable[DestinationRecord], limit: int = 30) -> str:
    """Summarise featured destinations so recommendations favour the catalog."""
    lines = []
    for dest in list(destinations)[:limit]:
        line = f"- {dest.name}, {dest.country} ({dest.category}, {dest.budget_level.value} budget, best {dest.best_season})"
        if dest.is_hidden_gem:
            line += " [hidden gem]"
        lines.append(line)

    if not lines:
        return DEFAULT_CATALOG_CONTEXT
    return "FEATURED DESTINATIONS (prefer these when they fit):\n" + "\n".join(lines)


def build_language_instruction(language: str) -> str:
    """Build language instruction for the system prompt."""
    if language.lower() == "english":
        return ""
    return f"""
IMPORTANT: Reply in {language}. Keep proper names (places, restaurants) in their original form."""


def conversation_turns(message: str, history: Iterable[ChatMessage]) -> list[dict[str, str]]:
    """
    Role/content dicts for a chat request: prior turns, then ``message``.

    Empty turns and earlier fallback replies are left out; they carry nothing
    the model should continue from.
    """
    turns = [
        {"role": msg.role, "content": msg.content}
        for msg in history
        if msg.content.strip() and msg.content != FALLBACK_REPLY
    ]
    turns.append({"role": "user", "content": message})
    return turns


class ConciergeAgent(ABC):
    """Abstract base class for streaming chat concierge agents."""

    def __init__(self, api_key: str):
        self.api_key = api_key
        self._destinations: list[DestinationRecord] = []
        self._language: str = "English"
        self._update_system_prompt()

    def set_destinations(self, destinations: Iterable[DestinationRecord]) -> None:
        """Update the destinations the agent should know about."""
        self._destinations = list(destinations)
        self._update_system_prompt()

    def set_language(self, language: str) -> None:
        """Update the agent's language setting."""
        self._language = language
        self._update_system_prompt()

    def _update_system_prompt(self) -> None:
        """Rebuild system prompt based on current destinations and language."""
        self.system_prompt = SYSTEM_PROMPT_TEMPLATE.format(
            catalog_context=build_catalog_context(self._destinations),
            language_instruction=build_language_instruction(self._language),
        )

    @abstractmethod
    def chat(self, message: str, history: list[ChatMessage]) -> Iterator[str]:
        """
        Send a message and get a streaming response.

        Args:
            message: User's message
            history: Previous chat messages

        Yields:
            Chunks of the response as they arrive
        """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the display name of this agent."""

    @property
    @abstractmethod
    def model_id(self) -> str:
        """Return the model ID being used."""


class Concierge:
    """Chat session wrapper that keeps provider failures out of the UI."""

    def __init__(self, agent: ConciergeAgent | None):
        self.agent = agent
        self.history: list[ChatMessage] = []

    def reply(self, message: str) -> Iterator[str]:
        """
        Stream the assistant's reply and record both turns in the history.

        A missing agent or a provider failure yields FALLBACK_REPLY (after any
        chunks already streamed) instead of raising.
        """
        chunks: list[str] = []
        if self.agent is None:
            chunks.append(FALLBACK_REPLY)
            yield FALLBACK_REPLY
        else:
            try:
                for chunk in self.agent.chat(message, self.history):
                    chunks.append(chunk)
                    yield chunk
            except Exception:
                logger.exception("Concierge agent %s failed", self.agent.name)
                chunks.append(FALLBACK_REPLY)
                yield FALLBACK_REPLY

        self.history.append(ChatMessage(role="user", content=message))
        self.history.append(ChatMessage(role="assistant", content="".join(chunks)))

    def reset(self) -> None:
        self.history = []
