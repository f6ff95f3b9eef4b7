"""Tests for Anthropic Messages <-> Gemini generateContent translation."""

import pytest

from gemini_proxy.core.exceptions import EmptyResponseError, InvalidRequestError
from gemini_proxy.messages import (
    generate_content_to_messages,
    map_finish_reason,
    messages_to_generate_content,
)


class TestMessagesToGenerateContent:
    """Tests for request translation."""

    def test_simple_user_message(self):
        """A single user turn with max_tokens only."""
        payload = {
            "model": "claude-3-5-sonnet",
            "max_tokens": 10,
            "messages": [{"role": "user", "content": "Hello"}],
        }

        result = messages_to_generate_content(payload)

        assert result == {
            "contents": [{"role": "user", "parts": [{"text": "Hello"}]}],
            "generationConfig": {"maxOutputTokens": 10},
        }

    def test_roles_are_mapped_in_order_without_merging(self):
        payload = {
            "messages": [
                {"role": "user", "content": "a"},
                {"role": "user", "content": "b"},
                {"role": "assistant", "content": "c"},
            ]
        }

        contents = messages_to_generate_content(payload)["contents"]

        assert [c["role"] for c in contents] == ["user", "user", "model"]
        assert [c["parts"][0]["text"] for c in contents] == ["a", "b", "c"]

    def test_each_parameter_is_copied_alone(self):
        """Only parameters present in the request appear in generationConfig."""
        base = {"messages": [{"role": "user", "content": "x"}]}
        cases = [
            ("max_tokens", 50, "maxOutputTokens"),
            ("temperature", 0.2, "temperature"),
            ("top_p", 0.9, "topP"),
            ("top_k", 40, "topK"),
            ("stop_sequences", ["END"], "stopSequences"),
        ]
        for source_key, value, target_key in cases:
            result = messages_to_generate_content({**base, source_key: value})
            assert result["generationConfig"] == {target_key: value}, source_key

    def test_all_parameters(self):
        payload = {
            "messages": [{"role": "user", "content": "x"}],
            "max_tokens": 100,
            "temperature": 0.5,
            "top_p": 0.8,
            "top_k": 20,
            "stop_sequences": ["a", "b"],
        }

        config = messages_to_generate_content(payload)["generationConfig"]

        assert config == {
            "maxOutputTokens": 100,
            "temperature": 0.5,
            "topP": 0.8,
            "topK": 20,
            "stopSequences": ["a", "b"],
        }

    def test_zero_values_are_copied(self):
        payload = {"messages": [], "temperature": 0, "max_tokens": 0}
        config = messages_to_generate_content(payload)["generationConfig"]
        assert config == {"maxOutputTokens": 0, "temperature": 0}

    def test_no_parameters_omits_generation_config(self):
        result = messages_to_generate_content({"messages": [{"role": "user", "content": "x"}]})
        assert "generationConfig" not in result

    def test_empty_stop_sequences_are_omitted(self):
        result = messages_to_generate_content({"messages": [], "stop_sequences": []})
        assert "generationConfig" not in result

    def test_system_string(self):
        payload = {"system": "Be terse.", "messages": [{"role": "user", "content": "x"}]}
        result = messages_to_generate_content(payload)
        assert result["systemInstruction"] == {"parts": [{"text": "Be terse."}]}

    def test_system_blocks_are_joined(self):
        payload = {
            "system": [{"type": "text", "text": "One."}, {"type": "text", "text": "Two."}],
            "messages": [],
        }
        result = messages_to_generate_content(payload)
        assert result["systemInstruction"] == {"parts": [{"text": "One.\nTwo."}]}

    def test_system_blocks_with_non_string_text_are_skipped(self):
        payload = {
            "system": [
                {"type": "text", "text": None},
                {"type": "text", "text": 42},
                {"type": "text", "text": "Kept."},
            ],
            "messages": [],
        }
        result = messages_to_generate_content(payload)
        assert result["systemInstruction"] == {"parts": [{"text": "Kept."}]}

    def test_system_with_only_null_text_omits_instruction(self):
        payload = {"system": [{"type": "text", "text": None}], "messages": []}
        assert "systemInstruction" not in messages_to_generate_content(payload)

    def test_stop_sequences_are_passed_through_unchanged(self):
        """A string is not split into characters."""
        result = messages_to_generate_content({"messages": [], "stop_sequences": "END"})
        assert result["generationConfig"] == {"stopSequences": "END"}

    def test_no_system_omits_instruction(self):
        result = messages_to_generate_content({"messages": []})
        assert "systemInstruction" not in result

    def test_empty_messages_list_is_accepted(self):
        assert messages_to_generate_content({"messages": []}) == {"contents": []}

    @pytest.mark.parametrize("messages", [None, "hello", {"role": "user"}])
    def test_invalid_messages_raise(self, messages):
        payload = {} if messages is None else {"messages": messages}
        with pytest.raises(InvalidRequestError) as exc_info:
            messages_to_generate_content(payload)
        assert exc_info.value.code == "invalid_messages"
        assert "messages" in exc_info.value.message

    def test_image_content(self):
        payload = {
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": "What is this?"},
                        {"type": "image", "source": {"media_type": "image/png", "data": "AAAA"}},
                    ],
                }
            ]
        }

        parts = messages_to_generate_content(payload)["contents"][0]["parts"]

        assert parts == [
            {"text": "What is this?"},
            {"inlineData": {"mimeType": "image/png", "data": "AAAA"}},
        ]


class TestMapFinishReason:
    """Tests for finishReason -> stop_reason mapping."""

    @pytest.mark.parametrize(
        "finish_reason,expected",
        [
            ("STOP", "end_turn"),
            ("MAX_TOKENS", "max_tokens"),
            ("SAFETY", "stop_sequence"),
            ("RECITATION", "stop_sequence"),
            ("OTHER", "end_turn"),
            ("FINISH_REASON_UNSPECIFIED", "end_turn"),
            (None, "end_turn"),
        ],
    )
    def test_mapping(self, finish_reason, expected):
        assert map_finish_reason(finish_reason) == expected


class TestGenerateContentToMessages:
    """Tests for response translation."""

    def test_simple_response(self):
        payload = {
            "candidates": [
                {
                    "content": {"role": "model", "parts": [{"text": "Hello! How can I help?"}]},
                    "finishReason": "STOP",
                }
            ],
            "usageMetadata": {"promptTokenCount": 3, "candidatesTokenCount": 7},
        }

        result = generate_content_to_messages(payload, "msg_abc", "claude-3-5-sonnet")

        assert result == {
            "id": "msg_abc",
            "type": "message",
            "role": "assistant",
            "content": [{"type": "text", "text": "Hello! How can I help?"}],
            "model": "claude-3-5-sonnet",
            "stop_reason": "end_turn",
            "stop_sequence": None,
            "usage": {"input_tokens": 3, "output_tokens": 7},
        }

    def test_safety_maps_to_stop_sequence(self):
        payload = {"candidates": [{"content": {"parts": [{"text": ""}]}, "finishReason": "SAFETY"}]}
        result = generate_content_to_messages(payload, "msg_x", "m")
        assert result["stop_reason"] == "stop_sequence"

    def test_max_tokens(self):
        payload = {"candidates": [{"content": {"parts": [{"text": "cut"}]}, "finishReason": "MAX_TOKENS"}]}
        assert generate_content_to_messages(payload, "msg_x", "m")["stop_reason"] == "max_tokens"

    def test_text_parts_are_concatenated(self):
        payload = {"candidates": [{"content": {"parts": [{"text": "foo"}, {"text": "bar"}]}}]}
        result = generate_content_to_messages(payload, "msg_x", "m")
        assert result["content"] == [{"type": "text", "text": "foobar"}]

    def test_only_first_candidate_is_used(self):
        payload = {
            "candidates": [
                {"content": {"parts": [{"text": "first"}]}},
                {"content": {"parts": [{"text": "second"}]}},
            ]
        }
        result = generate_content_to_messages(payload, "msg_x", "m")
        assert result["content"][0]["text"] == "first"

    def test_missing_content_yields_empty_text(self):
        result = generate_content_to_messages({"candidates": [{}]}, "msg_x", "m")
        assert result["content"] == [{"type": "text", "text": ""}]
        assert result["stop_reason"] == "end_turn"

    def test_missing_usage_counts_are_zero(self):
        payload = {"candidates": [{"content": {"parts": [{"text": "x"}]}}], "usageMetadata": {}}
        result = generate_content_to_messages(payload, "msg_x", "m")
        assert result["usage"] == {"input_tokens": 0, "output_tokens": 0}

    @pytest.mark.parametrize("payload", [{}, {"candidates": []}, {"candidates": None}])
    def test_no_candidates_raises(self, payload):
        with pytest.raises(EmptyResponseError) as exc_info:
            generate_content_to_messages(payload, "msg_x", "m")
        assert exc_info.value.message == "No response candidate from Gemini"
