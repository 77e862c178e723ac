"""Tests for the concierge chat boundary."""

from contextlib import contextmanager

from wandernest.agents import ClaudeAgent, Concierge, ConciergeAgent
from wandernest.agents.base import (
    DEFAULT_CATALOG_CONTEXT,
    FALLBACK_REPLY,
    build_catalog_context,
    build_language_instruction,
    conversation_turns,
)
from wandernest.models import ChatMessage


class FakeAgent(ConciergeAgent):
    """Agent that replays canned chunks, optionally failing midway."""

    def __init__(self, chunks, fail_after=None):
        super().__init__(api_key="fake")
        self.chunks = chunks
        self.fail_after = fail_after
        self.calls = []

    @property
    def name(self):
        return "Fake"

    @property
    def model_id(self):
        return "fake-1"

    def chat(self, message, history):
        self.calls.append((message, list(history)))
        for i, chunk in enumerate(self.chunks):
            if self.fail_after is not None and i == self.fail_after:
                raise ConnectionError("provider down")
            yield chunk


class FakeStream:
    def __init__(self, chunks):
        self.text_stream = iter(chunks)


class FakeMessages:
    """Records stream() requests the way anthropic.Anthropic().messages receives them."""

    def __init__(self, chunks):
        self.chunks = chunks
        self.requests = []

    @contextmanager
    def stream(self, **kwargs):
        self.requests.append(kwargs)
        yield FakeStream(self.chunks)


class FakeClient:
    def __init__(self, chunks):
        self.messages = FakeMessages(chunks)


class TestSystemPrompt:
    """Tests for system prompt assembly."""

    def test_english_has_no_language_instruction(self):
        """Test that only non-English languages add a reply instruction."""
        assert build_language_instruction("English") == ""
        assert "Reply in Japanese" in build_language_instruction("Japanese")

    def test_catalog_context(self, make_record):
        """Test that the catalog context lists destinations and marks hidden gems."""
        context = build_catalog_context([make_record(name="Kyoto", is_hidden_gem=True)])
        assert "Kyoto" in context
        assert "[hidden gem]" in context
        assert build_catalog_context([]) == DEFAULT_CATALOG_CONTEXT

    def test_prompt_updates(self, make_record):
        """Test that destinations and language flow into the system prompt."""
        agent = FakeAgent([])
        agent.set_destinations([make_record(name="Lisbon")])
        agent.set_language("French")
        assert "Lisbon" in agent.system_prompt
        assert "Reply in French" in agent.system_prompt


class TestConversationTurns:
    """Tests for chat request message assembly."""

    def test_history_then_message(self):
        """Test that prior turns come first and the new message last."""
        history = [
            ChatMessage(role="user", content="Where in Japan?"),
            ChatMessage(role="assistant", content="Try Kyoto."),
        ]
        assert conversation_turns("And food?", history) == [
            {"role": "user", "content": "Where in Japan?"},
            {"role": "assistant", "content": "Try Kyoto."},
            {"role": "user", "content": "And food?"},
        ]

    def test_drops_empty_and_fallback_turns(self):
        """Test that blank turns and earlier fallback replies are left out."""
        history = [
            ChatMessage(role="user", content="Hi"),
            ChatMessage(role="assistant", content=FALLBACK_REPLY),
            ChatMessage(role="user", content="   "),
        ]
        assert conversation_turns("Hello?", history) == [
            {"role": "user", "content": "Hi"},
            {"role": "user", "content": "Hello?"},
        ]


class TestClaudeAgent:
    """Tests for ClaudeAgent against a stand-in client."""

    def test_streams_text_chunks(self, make_record):
        """Test that chat yields the streamed text and sends the system prompt."""
        client = FakeClient(["Visit ", "Kyoto."])
        agent = ClaudeAgent(api_key="fake", model="claude-test", max_tokens=256, client=client)
        agent.set_destinations([make_record(name="Kyoto")])

        history = [ChatMessage(role="user", content="Hi"), ChatMessage(role="assistant", content="Hello!")]
        assert "".join(agent.chat("Where in Japan?", history)) == "Visit Kyoto."

        request = client.messages.requests[0]
        assert request["model"] == "claude-test"
        assert request["max_tokens"] == 256
        assert request["system"] == agent.system_prompt
        assert "Kyoto" in request["system"]
        assert request["messages"][-1] == {"role": "user", "content": "Where in Japan?"}
        assert len(request["messages"]) == 3

    def test_identity(self):
        """Test the provider name and model id."""
        agent = ClaudeAgent(api_key="fake", client=FakeClient([]))
        assert agent.name == "Claude"
        assert agent.model_id == agent.model

    def test_works_inside_concierge(self):
        """Test that Concierge records the streamed Claude reply in history."""
        concierge = Concierge(ClaudeAgent(api_key="fake", client=FakeClient(["Bali."])))
        assert list(concierge.reply("Beach?")) == ["Bali."]
        assert concierge.history[-1].content == "Bali."


class TestConcierge:
    """Tests for Concierge.reply."""

    def test_streams_and_records_history(self):
        """Test that replies stream through and both turns land in history."""
        agent = FakeAgent(["Visit ", "Kyoto."])
        concierge = Concierge(agent)

        assert "".join(concierge.reply("Where in Japan?")) == "Visit Kyoto."
        assert [(m.role, m.content) for m in concierge.history] == [
            ("user", "Where in Japan?"),
            ("assistant", "Visit Kyoto."),
        ]

        list(concierge.reply("And food?"))
        assert len(agent.calls[1][1]) == 2

    def test_no_agent_yields_fallback(self):
        """Test that a missing agent yields the fallback reply."""
        concierge = Concierge(None)
        assert list(concierge.reply("Hi")) == [FALLBACK_REPLY]

    def test_provider_failure_yields_fallback(self):
        """Test that a provider error mid-stream ends with the fallback reply."""
        concierge = Concierge(FakeAgent(["Partial ", "answer"], fail_after=1))
        assert list(concierge.reply("Hi")) == ["Partial ", FALLBACK_REPLY]
        assert concierge.history[-1].content == "Partial " + FALLBACK_REPLY

    def test_reset(self):
        """Test that reset clears the conversation."""
        concierge = Concierge(FakeAgent(["ok"]))
        list(concierge.reply("Hi"))
        concierge.reset()
        assert concierge.history == []
