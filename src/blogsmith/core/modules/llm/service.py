import time
from uuid import UUID

import litellm
import structlog

from blogsmith.core.core import Service
from blogsmith.core.modules.history.models import OperationType, RequestMeta, UsageInput
from blogsmith.core.modules.history.pricing import UsageCost
from blogsmith.core.modules.history.service import content_preview
from blogsmith.core.modules.llm.models import GeneratedTitles, TokenUsage
from blogsmith.core.modules.llm.prompts import SYSTEM_PROMPT, build_title_prompt
from blogsmith.core.modules.llm.utils import parse_titles
from blogsmith.errors import ProviderError, ValidationError

logger = structlog.get_logger(__name__)

TITLE_TEMPERATURE = 0.8
TITLE_MAX_TOKENS = 300

# Remaining provider failures, reported to the client as 502
PROVIDER_ERRORS = (
    litellm.APIError,
    litellm.APIConnectionError,
    litellm.Timeout,
    litellm.BadRequestError,
    litellm.NotFoundError,
    litellm.ServiceUnavailableError,
    litellm.InternalServerError,
)


class LLMService(Service):
    """Blog title generation through litellm."""

    def model_pricing(self) -> tuple[str, float, float]:
        """Provider name and per-token input/output prices for the configured model.

        Models missing from litellm's cost map are priced at zero.
        """
        info = litellm.model_cost.get(self.core.config.llm_model, {})
        return (
            info.get("litellm_provider", "openai"),
            info.get("input_cost_per_token", 0.0),
            info.get("output_cost_per_token", 0.0),
        )

    async def generate_titles(
        self,
        user_id: UUID,
        keywords: list[str],
        blog_type: str | None,
        session_id: str | None = None,
        meta: RequestMeta | None = None,
    ) -> GeneratedTitles:
        """Ask the LLM for up to five titles and record the call in usage history."""
        keywords = [k.strip() for k in keywords if k.strip()]
        if not keywords:
            raise ValidationError("Keywords are required")

        config = self.core.config
        if not config.llm_api_key:
            raise ValidationError("LLM API key not configured")

        start_time = time.time()
        try:
            response = await litellm.acompletion(
                model=config.llm_model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_title_prompt(keywords, blog_type)},
                ],
                temperature=TITLE_TEMPERATURE,
                max_tokens=TITLE_MAX_TOKENS,
                api_key=config.llm_api_key,
            )
        except litellm.AuthenticationError as e:
            raise ProviderError("Invalid LLM API key. Please check your configuration.", status_code=401) from e
        except litellm.RateLimitError as e:
            raise ProviderError("Rate limit exceeded. Please try again later.", status_code=429) from e
        except PROVIDER_ERRORS as e:
            logger.warning("title_generation_failed", model=config.llm_model, error=str(e))
            raise ProviderError("Failed to generate titles. Please try again.") from e

        duration_ms = int((time.time() - start_time) * 1000)

        content = response.choices[0].message.content
        if not content:
            raise ProviderError("No content generated by the LLM")
        titles = parse_titles(content)
        if not titles:
            raise ProviderError("No valid titles generated")

        usage = None
        raw_usage = getattr(response, "usage", None)
        if raw_usage:
            usage = TokenUsage(
                prompt_tokens=raw_usage.prompt_tokens,
                completion_tokens=raw_usage.completion_tokens,
                total_tokens=raw_usage.total_tokens,
            )

        provider, input_price, output_price = self.model_pricing()
        cost = UsageCost(
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
            input_price_per_token=input_price,
            output_price_per_token=output_price,
            usd_to_inr_rate=config.usd_to_inr_rate,
        )
        generated = "\n".join(titles)
        record = await self.core.services.history.record_usage(
            user_id,
            UsageInput(
                session_id=session_id,
                operation_type=OperationType.TITLE_GENERATION,
                api_provider=provider,
                model_id=config.llm_model,
                model_name=config.llm_model,
                keywords=keywords,
                blog_type=blog_type,
                pricing_units="per_token",
                generated_content_full=generated,
                generated_content_preview=content_preview(generated),
                content_length=len(generated),
                all_generated_titles=titles,
                **cost.as_usage_fields(),
            ),
            meta,
        )
        logger.info(
            "titles_generated",
            user_id=user_id,
            session_id=record.session_id,
            model=config.llm_model,
            title_count=len(titles),
            duration_ms=duration_ms,
        )
        return GeneratedTitles(titles=titles, usage=usage, session_id=record.session_id)
