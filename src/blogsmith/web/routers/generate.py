from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel, Field

from blogsmith.core.modules.llm.models import GeneratedTitles
from blogsmith.web.deps import AppDep, AuthTokenDep, RequestMetaDep
from blogsmith.web.openapi import ErrorResponse

router = APIRouter(tags=["generate"])


class GenerateTitlesRequest(BaseModel):
    keywords: list[str] = Field(..., description="Keywords the titles should include")
    blog_type: str | None = Field(None, description="Blog type: Listicle, Informative, Solution-based, How-to or Case Study")
    session_id: str | None = Field(None, description="Workflow session id; coalesced when omitted")


class HumanizeRequest(BaseModel):
    text: str = Field(..., description="Text to rewrite")
    session_id: str | None = Field(None, description="Workflow session id; coalesced when omitted")


@router.post(
    "/generate/titles",
    summary="Generate blog titles",
    description="Generate up to five SEO-friendly titles from keywords and record the call in usage history.",
    operation_id="generateTitles",
    responses={
        200: {"description": "Generated titles"},
        400: {"model": ErrorResponse, "description": "No keywords or LLM not configured"},
        401: {"model": ErrorResponse, "description": "Not authenticated or LLM key rejected"},
        403: {"model": ErrorResponse, "description": "Account pending approval"},
        429: {"model": ErrorResponse, "description": "LLM rate limit exceeded"},
    },
)
async def generate_titles(
    request: GenerateTitlesRequest, app: AppDep, auth_token: AuthTokenDep, meta: RequestMetaDep
) -> GeneratedTitles:
    return await app.generate_titles(auth_token, request.keywords, request.blog_type, request.session_id, meta)


@router.post(
    "/humanize",
    summary="Humanize text",
    description="Rewrite text through the Rephrasy humanizer and record the cost. Returns the provider response.",
    operation_id="humanize",
    responses={
        200: {"description": "Provider response with the rewritten text"},
        400: {"model": ErrorResponse, "description": "No text or humanizer not configured"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Account pending approval"},
        502: {"model": ErrorResponse, "description": "Provider failure"},
    },
)
async def humanize(request: HumanizeRequest, app: AppDep, auth_token: AuthTokenDep, meta: RequestMetaDep) -> dict[str, Any]:
    result = await app.humanize(auth_token, request.text, request.session_id, meta)
    return result.as_response()
