from typing import Any

from pydantic import BaseModel, ConfigDict

# Rephrasy list prices in USD per token
INPUT_PRICE_PER_TOKEN = 0.0000001
OUTPUT_PRICE_PER_TOKEN = 0.0000002

HUMANIZE_STEP_NUMBER = 7


class HumanizeResult(BaseModel):
    """Rephrasy response body, passed through to the client unchanged."""

    model_config = ConfigDict(extra="allow")

    output: str | None = None
    input_tokens: int | None = None
    output_tokens: int | None = None

    def as_response(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)
