import pytest

from models.project import Section, SectionSpec, SectionStatus
from orchestrator.coherence_refiner import CoherenceRefiner, concatenate_sections
from orchestrator.pipeline_types import EventType
from orchestrator.section_refiner import SectionRefiner, fallback_section_specs
from orchestrator.section_writer import SectionWriter, fallback_keywords
from utils.errors import NoContentError, ParseError, ProviderError

from conftest import FakeLLMClient, FakeSearchClient, broken_stream, refined_sections_json


def completed(title: str, content: str) -> Section:
    return Section(id=title.lower(), title=title, content=content, status=SectionStatus.COMPLETED)


# -------------------------------------------------------------------
# SectionRefiner
# -------------------------------------------------------------------


def test_refine_maps_payload_to_specs(project):
    llm = FakeLLMClient([refined_sections_json("Intro", "Body")])
    specs = SectionRefiner(llm).refine("Remote Work", "blogPost", "ctx", ["Intro", "Body"])

    assert [s.id for s in specs] == ["sec-0", "sec-1"]
    assert specs[0].key_points == ("Intro basics", "Intro details")
    assert specs[0].estimated_length == 400
    assert llm.calls[0]["schema"] is not None


def test_refine_deduplicates_ids():
    payload = (
        '{"sections": ['
        '{"id": "s", "title": "A", "description": "", "keyPoints": [], "estimatedLength": 100},'
        '{"id": "s", "title": "B", "description": "", "keyPoints": [], "estimatedLength": 100}'
        "]}"
    )
    specs = SectionRefiner(FakeLLMClient([payload])).refine("T", "blogPost", "", ["A", "B"])
    assert len({s.id for s in specs}) == 2


def test_refine_raises_parse_error_on_malformed_output():
    with pytest.raises(ParseError):
        SectionRefiner(FakeLLMClient(["not json at all"])).refine("T", "blogPost", "", ["A"])


def test_refine_or_fallback_uses_outline_when_provider_fails(project):
    llm = FakeLLMClient([ProviderError("down", provider="fake", attempts=4)])
    specs, refined = SectionRefiner(llm).refine_or_fallback(project)

    assert refined is False
    assert [s.title for s in specs] == ["Intro", "Body", "Conclusion"]
    assert [s.id for s in specs] == ["section-0", "section-1", "section-2"]
    assert all(s.estimated_length == 300 for s in specs)
    assert specs[1].description == "Content for Body"
    assert specs[1].key_points == ("Key point for Body",)


def test_fallback_specs_skip_nothing_and_keep_order():
    assert [s.title for s in fallback_section_specs(["B", "A"])] == ["B", "A"]


# -------------------------------------------------------------------
# SectionWriter
# -------------------------------------------------------------------


def spec() -> SectionSpec:
    return SectionSpec(
        id="sec-0",
        title="Remote work productivity",
        description="Why it matters",
        key_points=("Flexible scheduling benefits", "Communication tooling"),
    )


def test_fallback_keywords_heuristic():
    assert fallback_keywords(spec()) == [
        "Remote",
        "work",
        "productivity",
        "Flexible",
        "scheduling",
    ]


def test_extract_keywords_falls_back_on_empty_result():
    llm = FakeLLMClient(['{"keywords": []}'])
    writer = SectionWriter(llm, FakeSearchClient())

    assert writer.extract_keywords(spec(), "ctx") == fallback_keywords(spec())


def test_write_streaming_event_order(project, fake_search):
    llm = FakeLLMClient(['{"keywords": ["remote work", "async teams"]}'], streams=[["Hel", "lo"]])
    writer = SectionWriter(llm, fake_search)

    events = list(writer.write_streaming(spec(), project))

    assert [e.type for e in events] == [
        EventType.PROGRESS,
        EventType.KEYWORDS,
        EventType.PROGRESS,
        EventType.SEARCH_RESULTS,
        EventType.PROGRESS,
        EventType.CONTENT,
        EventType.CONTENT,
    ]
    assert events[0].data["message"] == "Extracting search keywords for: Remote work productivity"
    assert events[1].data["keywords"] == ["remote work", "async teams"]
    assert events[3].data["message"] == "Found 2 relevant sources"
    assert "".join(e.data["content"] for e in events if e.type is EventType.CONTENT) == "Hello"
    assert fake_search.queries == [["remote work", "async teams"]]

    prompt = llm.stream_calls[0][-1]["content"]
    assert "## RECENT SEARCH RESULTS AND CURRENT INFORMATION:" in prompt


def test_write_streaming_falls_back_when_enhanced_stream_fails(project):
    llm = FakeLLMClient(
        ['{"keywords": ["k"]}'],
        streams=[ProviderError("open failed", provider="fake"), ["plain"]],
    )
    writer = SectionWriter(llm, FakeSearchClient())

    events = list(writer.write_streaming(spec(), project))

    assert events[-1].type is EventType.CONTENT
    assert events[-1].data["content"] == "plain"
    assert len(llm.stream_calls) == 2


def test_write_streaming_reports_mid_stream_failure(project):
    llm = FakeLLMClient(['{"keywords": ["k"]}'], streams=[broken_stream("Par", "tial")])
    writer = SectionWriter(llm, FakeSearchClient())

    events = list(writer.write_streaming(spec(), project))

    assert [e.type for e in events[-3:]] == [EventType.CONTENT, EventType.CONTENT, EventType.ERROR]
    assert events[-1].data["message"] == "Content generation failed"


def test_write_buffered_falls_back_to_plain_prompt(project):
    llm = FakeLLMClient(
        ['{"keywords": ["k"]}', ProviderError("enhanced failed", provider="fake"), "Plain text"]
    )
    writer = SectionWriter(llm, FakeSearchClient())

    assert writer.write(spec(), project) == "Plain text"
    assert "RECENT SEARCH RESULTS" not in llm.calls[-1]["messages"][-1]["content"]


# -------------------------------------------------------------------
# CoherenceRefiner
# -------------------------------------------------------------------


def test_concatenate_sections_format():
    sections = [completed("Intro", "Hello world"), completed("Body", "More")]
    assert concatenate_sections(sections) == "## Intro\n\nHello world\n\n## Body\n\nMore"


def test_refine_or_concatenate_falls_back_on_provider_error():
    llm = FakeLLMClient([ProviderError("down", provider="fake", attempts=4)])
    text, applied = CoherenceRefiner(llm).refine_or_concatenate(
        "Doc", "blogPost", [completed("Intro", "Hello world")]
    )

    assert text == "## Intro\n\nHello world"
    assert applied is False


def test_refine_or_concatenate_uses_model_output():
    llm = FakeLLMClient(["# Doc\n\nPolished"])
    text, applied = CoherenceRefiner(llm).refine_or_concatenate(
        "Doc", "blogPost", [completed("Intro", "Hello world")]
    )

    assert text == "# Doc\n\nPolished"
    assert applied is True


def test_refine_requires_completed_content():
    pending = Section(id="a", title="A")
    with pytest.raises(NoContentError, match="No completed sections to refine"):
        CoherenceRefiner(FakeLLMClient()).refine("Doc", "blogPost", [pending, completed("B", "  ")])
