from enum import StrEnum

from pydantic import BaseModel, Field


class BlogType(StrEnum):
    LISTICLE = "Listicle"
    INFORMATIVE = "Informative"
    SOLUTION_BASED = "Solution-based"
    HOW_TO = "How-to"
    CASE_STUDY = "Case Study"


class TokenUsage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class GeneratedTitles(BaseModel):
    """Result of a title generation request."""

    titles: list[str] = Field(..., description="Up to five candidate blog titles")
    usage: TokenUsage | None = Field(None, description="Token usage reported by the provider")
    session_id: str = Field(..., description="Workflow session the generation was recorded under")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "titles": ["10 Remote Work Tools That Save Hours", "How Remote Teams Stay Productive"],
                    "usage": {"prompt_tokens": 112, "completion_tokens": 58, "total_tokens": 170},
                    "session_id": "session_5f0c7f0e-8d7b-4c55-9f61-2d2c0a4e9c11_1718000000000",
                }
            ]
        }
    }
