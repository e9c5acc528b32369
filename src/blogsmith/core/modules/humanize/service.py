from uuid import UUID

import structlog

from blogsmith.core.core import Service
from blogsmith.core.modules.history.models import ApiProvider, OperationType, RequestMeta, UsageInput
from blogsmith.core.modules.history.pricing import UsageCost
from blogsmith.core.modules.history.service import content_preview
from blogsmith.core.modules.humanize.client import request_humanize
from blogsmith.core.modules.humanize.models import (
    HUMANIZE_STEP_NUMBER,
    INPUT_PRICE_PER_TOKEN,
    OUTPUT_PRICE_PER_TOKEN,
    HumanizeResult,
)
from blogsmith.errors import ValidationError

logger = structlog.get_logger(__name__)


class HumanizeService(Service):
    """Rewrites generated text through Rephrasy and records the cost."""

    async def humanize(
        self, user_id: UUID, text: str, session_id: str | None = None, meta: RequestMeta | None = None
    ) -> HumanizeResult:
        if not text or not text.strip():
            raise ValidationError("Text is required")

        config = self.core.config
        if not config.rephrasy_api_key:
            raise ValidationError("Rephrasy API key not configured")

        result = await request_humanize(
            config.rephrasy_api_url, config.rephrasy_api_key, config.rephrasy_model, text
        )

        cost = UsageCost(
            input_tokens=result.input_tokens or 0,
            output_tokens=result.output_tokens or 0,
            input_price_per_token=INPUT_PRICE_PER_TOKEN,
            output_price_per_token=OUTPUT_PRICE_PER_TOKEN,
            usd_to_inr_rate=config.usd_to_inr_rate,
        )
        output = result.output or ""
        # A failed history write must not discard a result the provider already billed
        try:
            record = await self.core.services.history.record_usage(
                user_id,
                UsageInput(
                    session_id=session_id,
                    operation_type=OperationType.HUMANIZE,
                    api_provider=ApiProvider.REPHRASY,
                    model_id=config.rephrasy_model,
                    model_name="Rephrasy Humanizer",
                    pricing_units="per_token",
                    generated_content_full=output,
                    generated_content_preview=content_preview(output, "Humanized content"),
                    content_length=len(output),
                    setup_step="humanize",
                    step_number=HUMANIZE_STEP_NUMBER,
                    **cost.as_usage_fields(),
                ),
                meta,
            )
        except Exception:
            logger.exception("humanize_history_save_failed", user_id=user_id)
            return result

        logger.info(
            "text_humanized",
            user_id=user_id,
            session_id=record.session_id,
            total_tokens=cost.total_tokens,
            total_cost_usd=cost.total_cost_usd,
        )
        return result
