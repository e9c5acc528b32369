from pydantic import BaseModel


class UsageCost(BaseModel):
    """Token counts and their price for a single provider call."""

    input_tokens: int = 0
    output_tokens: int = 0
    input_price_per_token: float = 0
    output_price_per_token: float = 0
    usd_to_inr_rate: float = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    @property
    def input_cost_usd(self) -> float:
        return self.input_tokens * self.input_price_per_token

    @property
    def output_cost_usd(self) -> float:
        return self.output_tokens * self.output_price_per_token

    @property
    def total_cost_usd(self) -> float:
        return self.input_cost_usd + self.output_cost_usd

    @property
    def total_cost_inr(self) -> float:
        return self.total_cost_usd * self.usd_to_inr_rate

    def as_usage_fields(self) -> dict[str, float | int]:
        """Fields in the shape stored on a usage record."""
        return {
            "input_tokens": self.input_tokens,
            "output_tokens": self.output_tokens,
            "total_tokens": self.total_tokens,
            "input_price_per_token": self.input_price_per_token,
            "output_price_per_token": self.output_price_per_token,
            "input_cost_usd": self.input_cost_usd,
            "output_cost_usd": self.output_cost_usd,
            "total_cost_usd": self.total_cost_usd,
            "total_cost_inr": self.total_cost_inr,
        }
