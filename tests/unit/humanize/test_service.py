"""Tests for humanization pricing and usage recording."""

import asyncio

import pytest

from blogsmith.core.modules.humanize import service as humanize_service
from blogsmith.core.modules.humanize.models import HumanizeResult
from blogsmith.errors import ProviderError, ValidationError


class TestHumanize:
    @pytest.fixture(autouse=True)
    def setup(self, core, config, mock_user, monkeypatch):
        self.core = core
        self.config = config
        self.user = mock_user
        self.stored = core.database.get_collection("usage_history").documents
        self.monkeypatch = monkeypatch
        self.requests: list[tuple[str, str, str, str]] = []
        self.reply: dict | Exception = {"output": "Warm human text.", "input_tokens": 1000, "output_tokens": 500}

        async def request_humanize(api_url, api_key, model, text):
            self.requests.append((api_url, api_key, model, text))
            if isinstance(self.reply, Exception):
                raise self.reply
            return HumanizeResult.model_validate(self.reply)

        monkeypatch.setattr(humanize_service, "request_humanize", request_humanize)

    def humanize(self, text="Robotic text.", session_id=None):
        return asyncio.run(self.core.services.humanize.humanize(self.user.id, text, session_id))

    def test_records_cost_and_step(self):
        result = self.humanize()

        assert result.output == "Warm human text."
        assert self.requests == [(self.config.rephrasy_api_url, "test-rephrasy-key", "Undetectable Model", "Robotic text.")]
        [document] = self.stored
        assert document["operation_type"] == "humanize"
        assert document["api_provider"] == "rephrasy"
        assert document["model_id"] == "Undetectable Model"
        assert document["model_name"] == "Rephrasy Humanizer"
        assert document["step_number"] == 7
        assert document["setup_step"] == "humanize"
        assert document["input_cost_usd"] == pytest.approx(1000 * 0.0000001)
        assert document["output_cost_usd"] == pytest.approx(500 * 0.0000002)
        assert document["total_cost_usd"] == pytest.approx(0.0002)
        assert document["total_cost_inr"] == pytest.approx(0.0002 * 83)
        assert document["total_tokens"] == 1500
        assert document["generated_content_preview"] == "Warm human text."

    def test_client_session_id_kept(self):
        self.humanize(session_id="session_from_client")
        assert self.stored[0]["session_id"] == "session_from_client"

    def test_preview_fallback_without_output(self):
        self.reply = {"input_tokens": 10}
        self.humanize()
        [document] = self.stored
        assert document["generated_content_preview"] == "Humanized content"
        assert document["content_length"] == 0
        assert document["output_cost_usd"] == 0

    def test_long_output_preview_truncated(self):
        self.reply = {"output": "x" * 800}
        self.humanize()
        assert self.stored[0]["generated_content_preview"] == "x" * 500
        assert self.stored[0]["content_length"] == 800

    def test_text_required(self):
        with pytest.raises(ValidationError, match="Text is required"):
            self.humanize(text="   ")
        assert self.requests == []

    def test_api_key_required(self):
        self.config.rephrasy_api_key = ""
        with pytest.raises(ValidationError, match="not configured"):
            self.humanize()
        assert self.requests == []

    def test_provider_error_propagates(self):
        self.reply = ProviderError("Rephrasy API error: no credits", status_code=402)
        with pytest.raises(ProviderError) as exc_info:
            self.humanize()
        assert exc_info.value.status_code == 402
        assert self.stored == []

    def test_result_returned_when_recording_fails(self):
        async def record_usage(*args, **kwargs):
            raise RuntimeError("database unavailable")

        self.monkeypatch.setattr(self.core.services.history, "record_usage", record_usage)
        result = self.humanize()
        assert result.output == "Warm human text."
        assert self.stored == []
