import pytest

from texttoslides.archive import Archive
from texttoslides.errors import ProviderError
from texttoslides.llm_client import ContentPlanner
from texttoslides.pipeline import analyze_template_request, generate_presentation
from texttoslides.schemas import ContentAnalysis, ProviderConfig, SlideStructure

CONFIG = ProviderConfig(provider="openai", api_key="test-key")


class ScriptedPlanner(ContentPlanner):
    name = "openai"

    def __init__(self, structure=None, fail_on=None):
        super().__init__(CONFIG)
        self.structure = structure
        self.fail_on = fail_on
        self.calls = []

    def complete(self, prompt, temperature, max_tokens):
        raise AssertionError("not used")

    def analyze_text(self, text, guidance=""):
        self.calls.append(("analyze_text", text, guidance))
        if self.fail_on == "analyze_text":
            raise ProviderError(self.name, "boom")
        return ContentAnalysis(title="Q1 Report", themes=["Revenue"])

    def generate_slide_structure(self, analysis, guidance=""):
        self.calls.append(("generate_slide_structure", analysis.title, guidance))
        return self.structure


def test_generate_presentation_runs_all_steps(blank_template_bytes):
    structure = SlideStructure.model_validate({
        "totalSlides": 2,
        "slides": [
            {"slideNumber": 1, "type": "title", "title": "Q1 Report", "content": []},
            {"slideNumber": 2, "type": "content", "title": "Highlights", "content": ["Revenue up 10%"]},
        ],
    })
    planner = ScriptedPlanner(structure)

    data = generate_presentation("Our quarter went well.", "short", CONFIG, blank_template_bytes, planner=planner)

    assert planner.calls == [
        ("analyze_text", "Our quarter went well.", "short"),
        ("generate_slide_structure", "Q1 Report", "short"),
    ]
    archive = Archive.from_bytes(data)
    assert "ppt/slides/slide2.xml" in archive
    assert "ppt/slides/slide3.xml" not in archive


def test_planner_failure_ends_the_request(blank_template_bytes):
    planner = ScriptedPlanner(fail_on="analyze_text")
    with pytest.raises(ProviderError):
        generate_presentation("text", "", CONFIG, blank_template_bytes, planner=planner)
    assert [c[0] for c in planner.calls] == ["analyze_text"]


def test_garbage_template_still_generates():
    planner = ScriptedPlanner(SlideStructure.model_validate({"slides": [{"title": "Only"}]}))
    data = generate_presentation("text", "", CONFIG, b"not a zip", planner=planner)
    assert "ppt/slides/slide1.xml" in Archive.from_bytes(data)


def test_analyze_template_request(blank_template_bytes):
    assert analyze_template_request(blank_template_bytes).metadata["analyzed"] is True
