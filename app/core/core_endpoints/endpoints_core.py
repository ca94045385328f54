from fastapi import APIRouter, Depends

from app.core.core_endpoints import schemas_core
from app.core.utils.config import Settings
from app.dependencies import get_settings
from app.types import standard_responses
from app.types.module import CoreModule

router = APIRouter(tags=["Core"])

core_module = CoreModule(
    root="core",
    tag="Core",
    router=router,
    factory=None,
)


@router.get(
    "/information",
    response_model=standard_responses.Envelope[schemas_core.CoreInformation],
    status_code=200,
)
async def read_information(
    settings: Settings = Depends(get_settings),
):
    """
    Return information about the API. This endpoint can be used to check if the API is up
    and to know which record shape is served under `/rec`.
    """

    return standard_responses.Envelope(
        data=schemas_core.CoreInformation(
            ready=True,
            version=settings.APP_VERSION,
            recommendation_schema=settings.RECOMMENDATION_SCHEMA,
        ),
    )
