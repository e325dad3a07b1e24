from rag_connector.response import error_completion, to_response
from rag_connector.types import ChatReply, ErrorOutcome


def test_outcomes_map_to_completions_in_order() -> None:
    outcomes = [
        ChatReply(content="first", prompt_tokens=12, completion_tokens=3),
        ErrorOutcome(error="rate limited", model="gpt-4o"),
        ChatReply(content=None, prompt_tokens=None),
    ]

    response = to_response(outcomes, "gpt-4o")

    assert response.model_type == "gpt-4o"
    assert [c.content for c in response.completions] == ["first", None, None]
    assert [c.token_usage for c in response.completions] == [12, None, None]
    assert [c.error for c in response.completions] == [None, "rate limited", None]


def test_payload_uses_host_field_names() -> None:
    response = to_response(
        [ChatReply(content="ok", prompt_tokens=5), ErrorOutcome(error="boom", model="m")],
        "m",
    )

    assert response.to_payload() == {
        "Completions": [
            {"Content": "ok", "TokenUsage": 5},
            {"Content": None, "TokenUsage": None, "Error": "boom"},
        ],
        "ModelType": "m",
    }


def test_error_completion_uses_exception_message() -> None:
    outcome = error_completion(ValueError("bad credential"), "gpt-4")

    assert outcome == ErrorOutcome(error="bad credential", model="gpt-4")


def test_error_completion_without_message_is_never_empty() -> None:
    assert error_completion(RuntimeError(), "gpt-4").error == "RuntimeError()"
    assert error_completion(KeyError(""), "gpt-4").error
