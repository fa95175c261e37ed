import json
from types import SimpleNamespace

import pytest

from texttoslides.errors import ProviderError, UnsupportedProviderError
from texttoslides.llm_client import (
    AnthropicPlanner, ContentPlanner, GeminiPlanner, OpenAIPlanner, PROVIDERS, create_planner, parse_response
)
from texttoslides.schemas import ContentAnalysis, ProviderConfig, SlideStructure

ANALYSIS = {"title": "Q1", "themes": ["Growth"], "keyPoints": {"Growth": ["Revenue up"]}, "slideCount": 3,
            "structure": "intro, body, close"}
STRUCTURE = {"totalSlides": 1, "slides": [{"slideNumber": 1, "type": "title", "title": "Q1", "content": []}]}


class FakeOpenAI:
    def __init__(self, replies):
        self.replies = list(replies)
        self.calls = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def _create(self, **kwargs):
        self.calls.append(kwargs)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        message = SimpleNamespace(content=reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeAnthropic:
    def __init__(self, reply):
        self.reply = reply
        self.calls = []
        self.messages = SimpleNamespace(create=self._create)

    def _create(self, **kwargs):
        self.calls.append(kwargs)
        return SimpleNamespace(content=[SimpleNamespace(type="text", text=self.reply)])


class FakeGemini:
    def __init__(self, reply):
        self.reply = reply
        self.calls = []
        self.models = SimpleNamespace(generate_content=self._generate)

    def _generate(self, **kwargs):
        self.calls.append(kwargs)
        return SimpleNamespace(text=self.reply)


def config(provider, model=None):
    return ProviderConfig(provider=provider, api_key="test-key", model=model)


def test_openai_planner_round_trip():
    client = FakeOpenAI([json.dumps(ANALYSIS), json.dumps(STRUCTURE)])
    planner = OpenAIPlanner(config("openai"), client=client)

    analysis = planner.analyze_text("Some text", "Be brief")
    structure = planner.generate_slide_structure(analysis, "Be brief")

    assert isinstance(analysis, ContentAnalysis)
    assert analysis.key_points == {"Growth": ["Revenue up"]}
    assert isinstance(structure, SlideStructure)
    assert structure.slides[0].title == "Q1"
    assert client.calls[0]["model"] == "gpt-4-turbo"
    assert client.calls[0]["response_format"] == {"type": "json_object"}
    assert client.calls[1]["response_format"] == {"type": "json_object"}
    assert "Some text" in client.calls[0]["messages"][0]["content"]
    assert '"keyPoints"' in client.calls[1]["messages"][0]["content"]


def test_anthropic_planner_accepts_fenced_json():
    client = FakeAnthropic("```json\n" + json.dumps(ANALYSIS) + "\n```")
    planner = AnthropicPlanner(config("anthropic", "claude-3-haiku-20240307"), client=client)
    assert planner.analyze_text("text").title == "Q1"
    assert client.calls[0]["model"] == "claude-3-haiku-20240307"
    assert client.calls[0]["max_tokens"] == 2000


def test_gemini_planner():
    client = FakeGemini(json.dumps(STRUCTURE))
    planner = GeminiPlanner(config("gemini"), client=client)
    structure = planner.generate_slide_structure(ContentAnalysis(title="x"))
    assert structure.total_slides == 1
    assert client.calls[0]["model"] == "gemini-1.5-pro"


def test_transport_failure_is_provider_error():
    planner = OpenAIPlanner(config("openai"), client=FakeOpenAI([ConnectionError("unreachable")]))
    with pytest.raises(ProviderError) as exc:
        planner.analyze_text("text")
    assert exc.value.provider == "openai"
    assert isinstance(exc.value.__cause__, ConnectionError)


@pytest.mark.parametrize("raw", ["", "   ", "not json", "[1, 2]", '{"slides": "oops"}'])
def test_unusable_bodies_are_provider_errors(raw):
    with pytest.raises(ProviderError):
        parse_response("openai", raw, SlideStructure)


def test_provider_registry_and_unknown_provider():
    assert set(PROVIDERS) == {"openai", "anthropic", "gemini"}
    with pytest.raises(UnsupportedProviderError) as exc:
        create_planner(config("mistral"))
    assert isinstance(exc.value, ValueError)
    assert "mistral" in str(exc.value)


def test_create_planner_uses_mapping(monkeypatch):
    class StubPlanner(OpenAIPlanner):
        def __init__(self, cfg):
            super().__init__(cfg, client=FakeOpenAI([]))

    monkeypatch.setitem(PROVIDERS, "openai", StubPlanner)
    planner = create_planner(config("openai", "gpt-4"))
    assert isinstance(planner, StubPlanner)
    assert planner.model == "gpt-4"
    assert planner.api_key == "test-key"


def test_planner_subclass_must_implement_complete():
    class Incomplete(ContentPlanner):
        name = "openai"

    with pytest.raises(TypeError):
        Incomplete(config("openai"))

    class Echo(ContentPlanner):
        name = "openai"

        def complete(self, prompt, temperature, max_tokens):
            return json.dumps(ANALYSIS)

    assert Echo(config("openai")).analyze_text("text").title == "Q1"
