"""Tests for title generation through litellm."""

import asyncio
from types import SimpleNamespace

import litellm
import pytest

from blogsmith.core.modules.history.models import RequestMeta
from blogsmith.errors import ProviderError, ValidationError

MODEL_COST = {"gpt-4o": {"litellm_provider": "openai", "input_cost_per_token": 0.0000025, "output_cost_per_token": 0.00001}}


def completion(content, prompt_tokens=40, completion_tokens=20):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
        ),
    )


class TestGenerateTitles:
    @pytest.fixture(autouse=True)
    def setup(self, core, config, mock_user, monkeypatch):
        self.config = config
        self.user = mock_user
        self.llm = core.services.llm
        self.stored = core.database.get_collection("usage_history").documents
        self.monkeypatch = monkeypatch
        self.calls: list[dict] = []
        monkeypatch.setattr(litellm, "model_cost", MODEL_COST)

    def reply_with(self, result):
        async def acompletion(**kwargs):
            self.calls.append(kwargs)
            if isinstance(result, Exception):
                raise result
            return result

        self.monkeypatch.setattr(litellm, "acompletion", acompletion)

    def generate(self, keywords=("python", "fastapi"), blog_type="Listicle"):
        return asyncio.run(
            self.llm.generate_titles(self.user.id, list(keywords), blog_type, None, RequestMeta(ip_address="203.0.113.7"))
        )

    def test_returns_titles_and_records_usage(self):
        self.reply_with(completion("1. Ten FastAPI Tips\n\n2. Python for Writers\n3. Shipping Faster"))

        result = self.generate(keywords=["python", " ", "fastapi"])

        assert result.titles == ["Ten FastAPI Tips", "Python for Writers", "Shipping Faster"]
        assert result.usage is not None
        assert result.usage.total_tokens == 60
        assert result.session_id.startswith(f"session_{self.user.id}_")

        [document] = self.stored
        assert document["operation_type"] == "title_generation"
        assert document["api_provider"] == "openai"
        assert document["all_generated_titles"] == result.titles
        assert document["keywords"] == ["python", "fastapi"]
        assert document["session_id"] == result.session_id
        assert document["ip_address"] == "203.0.113.7"
        assert document["total_cost_usd"] == pytest.approx(40 * 0.0000025 + 20 * 0.00001)
        assert document["total_cost_inr"] == pytest.approx((40 * 0.0000025 + 20 * 0.00001) * 83)

    def test_completion_parameters(self):
        self.reply_with(completion("A Title"))
        self.generate()
        [call] = self.calls
        assert call["model"] == "gpt-4o"
        assert call["temperature"] == 0.8
        assert call["max_tokens"] == 300
        assert call["api_key"] == "test-llm-key"
        assert [m["role"] for m in call["messages"]] == ["system", "user"]
        assert "python, fastapi" in call["messages"][1]["content"]

    def test_unknown_model_priced_at_zero(self):
        self.config.llm_model = "local-model"
        self.reply_with(completion("A Title"))
        self.generate()
        [document] = self.stored
        assert document["model_id"] == "local-model"
        assert document["total_cost_usd"] == 0

    def test_keywords_required(self):
        with pytest.raises(ValidationError, match="Keywords are required"):
            self.generate(keywords=["", "  "])

    def test_api_key_required(self):
        self.config.llm_api_key = ""
        self.reply_with(completion("A Title"))
        with pytest.raises(ValidationError, match="not configured"):
            self.generate()
        assert self.calls == []

    @pytest.mark.parametrize(
        ("error", "status_code"),
        [
            (litellm.AuthenticationError(message="bad key", llm_provider="openai", model="gpt-4o"), 401),
            (litellm.RateLimitError(message="slow down", llm_provider="openai", model="gpt-4o"), 429),
            (litellm.APIConnectionError(message="connection reset", llm_provider="openai", model="gpt-4o"), 502),
            (litellm.BadRequestError(message="unknown model", llm_provider="openai", model="gpt-4o"), 502),
        ],
    )
    def test_provider_errors(self, error, status_code):
        self.reply_with(error)
        with pytest.raises(ProviderError) as exc_info:
            self.generate()
        assert exc_info.value.status_code == status_code
        assert self.stored == []

    @pytest.mark.parametrize("content", [None, "", "\n  \n1. "])
    def test_empty_reply(self, content):
        self.reply_with(completion(content))
        with pytest.raises(ProviderError) as exc_info:
            self.generate()
        assert exc_info.value.status_code == 502
        assert self.stored == []
