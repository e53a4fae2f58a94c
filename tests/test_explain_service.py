# SPDX-License-Identifier: AGPL-3.0-only

import json

import pytest

from common.caching import SimpleCache
from common.errors import ModelOutputError
from explain.models import SCREEN_ASSIST_SCHEMA, SCREEN_ASSIST_SCHEMA_NAME
from explain.normalizer import normalize_explain_result
from explain.prompt_pack import CATEGORIES, build_explain_input, build_explain_prompt
from explain.service import ExplainService

from conftest import SAMPLE_DATA_URL, llm_reply


class TestExplainPrompt:

    def test_prompt_lists_categories(self):
        prompt = build_explain_prompt()
        assert "[math, code, writing, translation, finance, science, general]" in prompt
        assert "at most 3 essential follow-up questions" in prompt
        assert "Additional user instruction" not in prompt

    def test_instruction_is_trimmed_and_appended(self):
        prompt = build_explain_prompt("  focus on the second step  ")
        assert prompt.endswith("\n\nAdditional user instruction:\nfocus on the second step")

    def test_blank_instruction_is_ignored(self):
        assert build_explain_prompt("   ") == build_explain_prompt("")

    def test_input_carries_text_then_image(self):
        [turn] = build_explain_input(SAMPLE_DATA_URL)
        assert turn["role"] == "user"
        assert [c["type"] for c in turn["content"]] == ["input_text", "input_image"]
        assert turn["content"][1]["image_url"] == SAMPLE_DATA_URL

    def test_categories(self):
        assert CATEGORIES == ["math", "code", "writing", "translation", "finance", "science", "general"]


class TestNormalizeExplainResult:

    def test_valid_result(self, explain_payload):
        assert normalize_explain_result(json.dumps(explain_payload)) == explain_payload

    def test_integer_confidence_is_accepted(self, explain_payload):
        explain_payload["confidence"] = 1
        assert normalize_explain_result(json.dumps(explain_payload))["confidence"] == 1.0

    def test_invalid_json_keeps_raw_text(self):
        with pytest.raises(ModelOutputError) as exc:
            normalize_explain_result("not json at all")
        assert exc.value.to_dict() == {"error": "Model did not return valid JSON", "raw": "not json at all"}
        assert exc.value.status_code == 502

    @pytest.mark.parametrize("mutate", [
        lambda p: p.pop("followups"),
        lambda p: p.update(confidence="high"),
        lambda p: p.update(extra="field"),
        lambda p: p.update(followups="one question"),
    ])
    def test_schema_mismatch(self, explain_payload, mutate):
        mutate(explain_payload)
        text = json.dumps(explain_payload)
        with pytest.raises(ModelOutputError) as exc:
            normalize_explain_result(text)
        assert exc.value.to_dict() == {"error": "Model did not return valid JSON", "raw": text}


class TestExplainService:

    def test_process(self, explain_service, mock_llm_client, explain_payload):
        result = explain_service.process(SAMPLE_DATA_URL, "")

        assert result == explain_payload
        args = mock_llm_client.create_structured.call_args.args
        assert args[1] == SCREEN_ASSIST_SCHEMA_NAME
        assert args[2] == SCREEN_ASSIST_SCHEMA

    def test_schema_is_closed(self):
        assert SCREEN_ASSIST_SCHEMA["additionalProperties"] is False
        assert SCREEN_ASSIST_SCHEMA["required"] == ["category", "confidence", "summary", "followups"]

    def test_bad_output_raises(self, explain_service, mock_llm_client):
        mock_llm_client.create_structured.return_value = llm_reply("```json\n{}```")
        with pytest.raises(ModelOutputError):
            explain_service.process(SAMPLE_DATA_URL)

    def test_cache_hit_skips_model(self, mock_llm_client, explain_payload):
        service = ExplainService(llm_client=mock_llm_client, cache=SimpleCache(), use_cache=True,
                                 debug_metrics=False)

        first = service.process(SAMPLE_DATA_URL, "why?")
        second = service.process(SAMPLE_DATA_URL, "  why?  ")

        assert first == second == explain_payload
        assert mock_llm_client.create_structured.call_count == 1

    def test_different_instruction_misses_cache(self, mock_llm_client):
        service = ExplainService(llm_client=mock_llm_client, cache=SimpleCache(), use_cache=True,
                                 debug_metrics=False)

        service.process(SAMPLE_DATA_URL, "a")
        service.process(SAMPLE_DATA_URL, "b")

        assert mock_llm_client.create_structured.call_count == 2

    def test_debug_metrics(self, mock_llm_client):
        service = ExplainService(llm_client=mock_llm_client, use_cache=False, debug_metrics=True)

        result = service.process(SAMPLE_DATA_URL)

        assert result["_debug"]["llm_calls"] == 1
        assert result["_debug"]["total_tokens"] == 42
        assert "llm_done" in result["_debug"]["stages"]
