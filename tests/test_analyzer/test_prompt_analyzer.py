"""Tests for the prompt analyzer and its parameter repair rules."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from autopilot.analyzer.prompt_analyzer import PromptAnalyzer, repair_parameters
from autopilot.analyzer.prompt_templates import DEFAULT_EMAIL_BODY, SYSTEM_PROMPT
from autopilot.exceptions import MalformedAnalysisError
from autopilot.models.action import ActionRequest


def _analyzer(settings, response=None, side_effect=None):
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=response, side_effect=side_effect)
    return PromptAnalyzer(settings, client=client), client


class TestPromptTemplates:
    def test_system_prompt_lists_every_tool(self):
        for name in ("send_email", "read_emails", "search_emails", "send_message",
                     "list_channels", "read_sheet", "append_row", "chatId"):
            assert name in SYSTEM_PROMPT

    def test_system_prompt_asks_for_json(self):
        assert "requiredCredential" in SYSTEM_PROMPT
        assert "JSON" in SYSTEM_PROMPT


class TestRepairParameters:
    def test_body_backfilled_from_subject(self):
        params = repair_parameters("send_email", {"to": "a@b.com", "subject": "Lunch"})
        assert params["body"] == "Lunch"

    def test_body_default_when_no_subject(self):
        params = repair_parameters("send_email", {"to": "a@b.com"})
        assert params["body"] == DEFAULT_EMAIL_BODY

    def test_blank_body_replaced(self):
        params = repair_parameters("send_email", {"to": "a@b.com", "subject": "S", "body": ""})
        assert params["body"] == "S"

    def test_existing_body_kept(self):
        params = repair_parameters("send_email", {"subject": "S", "body": "real body"})
        assert params["body"] == "real body"

    def test_other_actions_untouched(self):
        assert repair_parameters("send_message", {"channel": "general"}) == {"channel": "general"}

    @pytest.mark.parametrize("raw", [None, "text", ["a"], 3])
    def test_non_dict_becomes_empty(self, raw):
        assert repair_parameters("read_emails", raw) == {}

    def test_input_not_mutated(self):
        original = {"to": "a@b.com"}
        repair_parameters("send_email", original)
        assert original == {"to": "a@b.com"}


class TestPromptAnalyzer:
    @pytest.mark.asyncio
    async def test_analyze_email(self, mock_settings, mock_openai_response):
        response = mock_openai_response({
            "intent": "Send a greeting",
            "tool": "gmail",
            "action": "send_email",
            "parameters": {"to": "a@b.com", "subject": "Hi", "body": "hello"},
            "requiredCredential": "gmail",
        })
        analyzer, _ = _analyzer(mock_settings, response)
        request = await analyzer.analyze("Send an email to a@b.com saying hello")
        assert isinstance(request, ActionRequest)
        assert request.tool == "gmail"
        assert request.action == "send_email"
        assert request.parameters["to"] == "a@b.com"
        assert request.required_credential == "gmail"
        assert request.original_prompt == "Send an email to a@b.com saying hello"

    @pytest.mark.asyncio
    async def test_email_without_body_gets_one(self, mock_settings, mock_openai_response):
        response = mock_openai_response({
            "tool": "gmail",
            "action": "send_email",
            "parameters": {"to": "a@b.com", "subject": "Weekly report"},
        })
        analyzer, _ = _analyzer(mock_settings, response)
        request = await analyzer.analyze("email a@b.com the weekly report")
        assert request.parameters["body"] == "Weekly report"

    @pytest.mark.asyncio
    async def test_tool_normalized(self, mock_settings, mock_openai_response):
        response = mock_openai_response({"tool": " Slack ", "action": "list_channels"})
        analyzer, _ = _analyzer(mock_settings, response)
        request = await analyzer.analyze("list my slack channels")
        assert request.tool == "slack"
        assert request.parameters == {}
        assert request.required_credential is None

    @pytest.mark.asyncio
    async def test_request_shape(self, mock_settings, mock_openai_response):
        response = mock_openai_response({"tool": "slack", "action": "list_channels"})
        analyzer, client = _analyzer(mock_settings, response)
        await analyzer.analyze("list channels")
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["temperature"] == mock_settings.analysis_temperature
        assert kwargs["messages"][0] == {"role": "system", "content": SYSTEM_PROMPT}
        assert kwargs["messages"][1] == {"role": "user", "content": "list channels"}

    @pytest.mark.asyncio
    async def test_empty_prompt_skips_model(self, mock_settings):
        analyzer, client = _analyzer(mock_settings)
        with pytest.raises(MalformedAnalysisError, match="Empty prompt"):
            await analyzer.analyze("   ")
        client.chat.completions.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_api_error(self, mock_settings):
        analyzer, _ = _analyzer(mock_settings, side_effect=RuntimeError("rate limited"))
        with pytest.raises(MalformedAnalysisError, match="OpenAI API error: rate limited"):
            await analyzer.analyze("do something")

    @pytest.mark.asyncio
    async def test_empty_content(self, mock_settings, mock_openai_response):
        analyzer, _ = _analyzer(mock_settings, mock_openai_response(None))
        with pytest.raises(MalformedAnalysisError, match="empty content"):
            await analyzer.analyze("do something")

    @pytest.mark.asyncio
    async def test_invalid_json(self, mock_settings, mock_openai_response):
        analyzer, _ = _analyzer(mock_settings, mock_openai_response("not json {{{"))
        with pytest.raises(MalformedAnalysisError, match="Malformed JSON"):
            await analyzer.analyze("do something")

    @pytest.mark.asyncio
    async def test_json_array_rejected(self, mock_settings, mock_openai_response):
        analyzer, _ = _analyzer(mock_settings, mock_openai_response("[1, 2]"))
        with pytest.raises(MalformedAnalysisError, match="not a JSON object"):
            await analyzer.analyze("do something")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "data",
        [{"action": "send_email"}, {"tool": "gmail"}, {"tool": "", "action": "x"}],
    )
    async def test_missing_tool_or_action(self, mock_settings, mock_openai_response, data):
        analyzer, _ = _analyzer(mock_settings, mock_openai_response(data))
        with pytest.raises(MalformedAnalysisError, match="missing tool or action"):
            await analyzer.analyze("do something")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "required_credential", [["gmail"], {"provider": "gmail"}],
    )
    async def test_wrongly_typed_field_rejected(
        self, mock_settings, mock_openai_response, required_credential
    ):
        data = {
            "tool": "gmail",
            "action": "send_email",
            "requiredCredential": required_credential,
        }
        analyzer, _ = _analyzer(mock_settings, mock_openai_response(data))
        with pytest.raises(MalformedAnalysisError, match="Invalid analysis"):
            await analyzer.analyze("email someone")
