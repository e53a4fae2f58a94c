# SPDX-License-Identifier: AGPL-3.0-only

import pytest
from unittest.mock import Mock, patch
from openai import OpenAIError

from common.errors import ConfigurationError, LLMServiceError
from common.llm_client import LLMClient


SCHEMA = {"type": "object", "properties": {}, "required": [], "additionalProperties": False}


def make_response(text='{"ok": true}', total_tokens=12):
    response = Mock()
    response.output_text = text
    response.usage = Mock(total_tokens=total_tokens)
    return response


class TestLLMClient:
    """Test suite for LLMClient."""

    @pytest.fixture
    def sdk(self):
        sdk = Mock()
        sdk.responses.create.return_value = make_response()
        return sdk

    @pytest.fixture
    def llm(self, sdk):
        return LLMClient(model="gpt-4.1-mini", timeout=5, max_retries=3, api_key="sk-test", client=sdk)

    def test_create_structured_request_shape(self, llm, sdk):
        result = llm.create_structured([{"role": "user", "content": "hi"}], "Thing", SCHEMA)

        assert result == {"text": '{"ok": true}', "tokens": 12}
        kwargs = sdk.responses.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4.1-mini"
        assert kwargs["input"] == [{"role": "user", "content": "hi"}]
        assert kwargs["text"] == {"format": {"type": "json_schema", "name": "Thing", "schema": SCHEMA}}
        assert "instructions" not in kwargs

    def test_instructions_are_forwarded(self, llm, sdk):
        llm.create_structured("hi", "Thing", SCHEMA, instructions="be brief")
        assert sdk.responses.create.call_args.kwargs["instructions"] == "be brief"

    def test_missing_usage_counts_zero_tokens(self, llm, sdk):
        response = make_response()
        response.usage = None
        sdk.responses.create.return_value = response

        assert llm.create_structured("hi", "Thing", SCHEMA)["tokens"] == 0

    @patch("common.llm_client.time.sleep")
    def test_retries_then_succeeds(self, mock_sleep, llm, sdk):
        sdk.responses.create.side_effect = [OpenAIError("busy"), make_response('{"a": 1}')]

        result = llm.create_structured("hi", "Thing", SCHEMA)

        assert result["text"] == '{"a": 1}'
        assert sdk.responses.create.call_count == 2
        mock_sleep.assert_called_once_with(1)

    @patch("common.llm_client.time.sleep")
    def test_gives_up_after_max_retries(self, mock_sleep, llm, sdk):
        sdk.responses.create.side_effect = OpenAIError("down")

        with pytest.raises(LLMServiceError) as exc:
            llm.create_structured("hi", "Thing", SCHEMA)

        assert "after 3 attempts" in str(exc.value)
        assert sdk.responses.create.call_count == 3
        assert [c.args[0] for c in mock_sleep.call_args_list] == [1, 2]

    def test_missing_api_key(self):
        llm = LLMClient(api_key=None)
        llm.api_key = None

        with pytest.raises(ConfigurationError):
            llm.create_structured("hi", "Thing", SCHEMA)
