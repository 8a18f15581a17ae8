import main
from orchestrator.pipeline import PipelineOrchestrator

from conftest import FakeLLMClient, FakeSearchClient, broken_stream, refined_sections_json

KEYWORDS = '{"keywords": ["remote work"]}'


def orchestrator_for(llm):
    return PipelineOrchestrator(llm, FakeSearchClient())


def test_polish_pass_is_printed_as_it_streams(project, capsys):
    deltas_seen = []

    def polish():
        for delta in ("Polished ", "document"):
            deltas_seen.append(capsys.readouterr().out)
            yield delta

    llm = FakeLLMClient(
        [refined_sections_json("Intro", "Body", "Conclusion")],
        streams=[["Intro text"], ["Body text"], ["Conclusion text"], polish()],
        default=KEYWORDS,
    )
    final = main.run_pipeline(orchestrator_for(llm), project)

    # output captured while the stream is still producing its second delta
    assert "=== Remote Work ===" in deltas_seen[1]
    assert deltas_seen[1].endswith("Polished ")
    assert capsys.readouterr().out.startswith("document")
    assert final.stream is None
    assert final.coherence_applied is True
    assert final.text == "Polished document"


def test_broken_polish_pass_prints_concatenated_sections(project, capsys):
    llm = FakeLLMClient(
        [refined_sections_json("Intro", "Body", "Conclusion")],
        streams=[["A"], ["B"], ["C"], broken_stream("Half")],
        default=KEYWORDS,
    )
    final = main.run_pipeline(orchestrator_for(llm), project)

    out = capsys.readouterr().out
    assert "Error: Coherence refinement failed" in out
    assert out.rstrip().endswith("## Intro\n\nA\n\n## Body\n\nB\n\n## Conclusion\n\nC")
    assert final.coherence_applied is False
