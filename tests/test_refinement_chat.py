import pytest

from api.streaming import DeltaStream
from context.refinement_session import RefinementSession
from orchestrator.pipeline import FinalContent
from orchestrator.refinement_chat import (
    MODIFICATION_ACK,
    ChatMode,
    RefinementChat,
    classify_message,
)
from utils.errors import ProviderError, ValidationError

from conftest import FakeLLMClient, broken_stream

CONTENT = "# Remote Work\n\nOriginal text."


@pytest.mark.parametrize(
    "message,expected",
    [
        ("Make it more professional", ChatMode.MODIFICATION),
        ("Can you SHORTEN this? Please make the tone lighter", ChatMode.MODIFICATION),
        ("What is the main argument?", ChatMode.CONVERSATION),
        ("Who is the audience?", ChatMode.CONVERSATION),
    ],
)
def test_classify_message(message, expected):
    assert classify_message(message) is expected


def test_question_with_modification_keyword_is_modification():
    assert classify_message("Why not rewrite the intro?") is ChatMode.MODIFICATION


def test_modification_returns_updated_content():
    llm = FakeLLMClient(["# Remote Work\n\nPolished text."])
    reply = RefinementChat(llm).respond(
        CONTENT, "Make it more formal", project_title="Remote Work", content_type="blogPost"
    )

    assert reply.mode is ChatMode.MODIFICATION
    assert reply.reply_text == MODIFICATION_ACK
    assert reply.updated_content == "# Remote Work\n\nPolished text."
    assert reply.has_content_update


def test_conversation_leaves_content_untouched():
    llm = FakeLLMClient(["It argues for flexibility."])
    history = [{"role": "user", "content": "hi"}, {"role": "assistant", "content": "hello"}]
    reply = RefinementChat(llm).respond(
        CONTENT, "What is the main point?", history, project_title="Remote Work", content_type="blogPost"
    )

    assert reply.mode is ChatMode.CONVERSATION
    assert reply.reply_text == "It argues for flexibility."
    assert reply.updated_content is None
    prompt = llm.calls[0]["messages"][-1]["content"]
    assert "user: hi" in prompt
    assert "assistant: hello" in prompt


@pytest.mark.parametrize("content,message", [("", "Make it shorter"), (CONTENT, "   ")])
def test_respond_requires_content_and_message(content, message):
    with pytest.raises(ValidationError):
        RefinementChat(FakeLLMClient()).respond(
            content, message, project_title="T", content_type="blogPost"
        )


def test_respond_streaming_returns_mode_and_stream():
    llm = FakeLLMClient(streams=[["New ", "text"]])
    mode, stream = RefinementChat(llm).respond_streaming(
        CONTENT, "rewrite the ending", project_title="T", content_type="blogPost"
    )

    assert mode is ChatMode.MODIFICATION
    assert stream.read_all() == "New text"


# -------------------------------------------------------------------
# RefinementSession
# -------------------------------------------------------------------


def make_session(llm, content=CONTENT, max_messages=20):
    return RefinementSession(
        RefinementChat(llm),
        project_title="Remote Work",
        content_type="blogPost",
        content=content,
        max_messages=max_messages,
    )


def test_session_applies_modification():
    session = make_session(FakeLLMClient(["Rewritten."]))
    reply = session.send("Make it shorter")

    assert reply.has_content_update
    assert session.content == "Rewritten."
    assert [m["role"] for m in session.get_messages()] == ["user", "assistant"]


def test_session_conversation_keeps_content():
    session = make_session(FakeLLMClient(["Two main points."]))
    session.send("What does it say?")

    assert session.content == CONTENT
    assert session.get_messages()[-1] == {"role": "assistant", "content": "Two main points."}


def test_session_history_excludes_current_message():
    seen = []

    def answer(messages):
        seen.append(messages[-1]["content"])
        return "ok"

    session = make_session(FakeLLMClient([answer, answer]))
    session.send("first question?")
    session.send("second question?")

    assert "user: first question?" in seen[1]
    assert "user: second question?" not in seen[1]


def test_session_history_is_trimmed():
    session = make_session(FakeLLMClient(default="ok"), max_messages=4)
    for i in range(5):
        session.send(f"question {i}?")

    messages = session.get_messages()
    assert len(messages) == 4
    assert messages[0]["content"] == "question 3?"


def test_session_failed_turn_records_nothing():
    session = make_session(FakeLLMClient())
    with pytest.raises(ProviderError):
        session.send("What now?")
    assert session.get_messages() == []


def test_take_final_drains_stream():
    session = make_session(FakeLLMClient(), content="")
    final = FinalContent(
        text="## Intro\n\nraw", stream=DeltaStream(["Pol", "ished"]), coherence_applied=True
    )

    assert session.take_final(final) == "Polished"
    assert session.content == "Polished"


def test_take_final_keeps_concatenation_when_stream_breaks():
    session = make_session(FakeLLMClient(), content="")
    final = FinalContent(
        text="## Intro\n\nraw", stream=DeltaStream(broken_stream("Pol")), coherence_applied=True
    )

    assert session.take_final(final) == "## Intro\n\nraw"
    assert final.coherence_applied is False


def test_summary_and_reset():
    session = make_session(FakeLLMClient(default="ok"))
    assert session.get_conversation_summary() == "No conversation history"

    session.send("hello?")
    assert "[USER] hello?" in session.get_conversation_summary()

    session.reset()
    assert session.get_messages() == []
