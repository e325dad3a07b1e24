from rag_connector.config import CONNECTOR_CONFIG, ConnectorOptions, ConversationPolicy
from rag_connector.ingest.parser import FormatDispatcher


def test_descriptor_declares_forwarded_properties_and_credential() -> None:
    property_ids = [prop.id for prop in CONNECTOR_CONFIG.properties]

    assert property_ids == [
        "prompt",
        "max_tokens",
        "temperature",
        "top_p",
        "frequency_penalty",
        "presence_penalty",
        "stop",
        "echo",
        "best_of",
        "logprobs",
    ]
    assert [setting.id for setting in CONNECTOR_CONFIG.settings] == ["API_KEY"]


def test_default_system_prompt() -> None:
    assert CONNECTOR_CONFIG.property_value("prompt") == "You are a helpful assistant."
    assert CONNECTOR_CONFIG.property_value("stop") == ["\n"]
    assert CONNECTOR_CONFIG.property_value("unknown") is None


def test_supported_formats_are_closed() -> None:
    assert FormatDispatcher().extensions == (".pdf", ".csv", ".docx", ".html", ".md", ".txt")


def test_default_options_walk_directories_and_strip_references() -> None:
    options = ConnectorOptions()

    assert options.recursive_directories is True
    assert options.conversation_policy is ConversationPolicy.STRIPPED_QUERY
