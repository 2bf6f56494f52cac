"""DCAT catalog routes."""

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from dcatbridge.domain.catalog.model.value import ShareContext
from dcatbridge.domain.catalog.service.pipeline import CatalogPipeline
from dcatbridge.domain.catalog.service.share import ShareService

router = APIRouter(tags=["catalog"], route_class=DishkaRoute)


@router.get("/{share_id}/{share_token}")
async def get_catalog(
    share_id: str,
    share_token: str,
    shares: FromDishka[ShareService],
    pipeline: FromDishka[CatalogPipeline],
) -> StreamingResponse:
    """Stream the DCAT catalog of a share.

    The share is verified before the response starts; failures after that
    point truncate the document instead of changing the status code.
    """
    share = await shares.verify_share(share_id, share_token)
    context = ShareContext(share_id=share.id, share_token=share_token)
    return StreamingResponse(pipeline.stream(context), media_type="application/json")
