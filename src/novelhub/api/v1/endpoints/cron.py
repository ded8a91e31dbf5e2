"""Endpoint invoked by the external scheduler to publish due chapters."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Header, status
from fastapi.responses import JSONResponse

from novelhub.api.v1.dependencies import StoreDep
from novelhub.core.errors import StoreUnavailableError, UnauthorizedError
from novelhub.core.security import verify_scheduler_credential
from novelhub.core.settings import settings
from novelhub.schemas.publish import PublishSweepResponse
from novelhub.services.publishing import PublicationSweeper

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cron", tags=["cron"])


def get_sweeper_dep(store: StoreDep) -> PublicationSweeper:
    """Return a sweeper bound to the request session."""
    return PublicationSweeper(store)


SweeperDep = Annotated[PublicationSweeper, Depends(get_sweeper_dep)]


@router.api_route("/publish", methods=["GET", "POST"], response_model=PublishSweepResponse)
async def publish_scheduled(
    sweeper: SweeperDep,
    authorization: Annotated[str | None, Header()] = None,
) -> JSONResponse:
    """Publish every scheduled chapter whose publish time has passed."""
    try:
        verify_scheduler_credential(authorization, settings.cron_secret)
    except UnauthorizedError:
        logger.warning("Rejected publish sweep with invalid scheduler credential")
        return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"error": "Unauthorized"})
    if not settings.cron_secret:
        logger.debug("CRON_SECRET not configured; running publish sweep unauthenticated")

    try:
        result = sweeper.sweep()
    except StoreUnavailableError:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )

    body = PublishSweepResponse(
        published_count=result.published_count,
        published_ids=result.published_ids,
        failed_ids=result.failed_ids,
    )
    return JSONResponse(content=body.model_dump(by_alias=True))
