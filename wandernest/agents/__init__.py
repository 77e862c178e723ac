from .base import Concierge, ConciergeAgent
from .claude_agent import ClaudeAgent

__all__ = ["Concierge", "ConciergeAgent", "ClaudeAgent"]
