from fastapi import APIRouter

from blogsmith.web.deps import AppDep

router = APIRouter(tags=["status"])


@router.get(
    "/status",
    summary="Service status",
    description="Public endpoint reporting whether the AI providers are configured.",
    operation_id="getStatus",
)
async def get_status(app: AppDep) -> dict[str, object]:
    return app.get_status()
