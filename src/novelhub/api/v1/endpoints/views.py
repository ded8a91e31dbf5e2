"""View counting endpoint for novel and chapter pages."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Body, Depends, Request, Response, status
from fastapi.responses import JSONResponse

from novelhub.api.v1.dependencies import StoreDep
from novelhub.core.settings import settings
from novelhub.schemas.view import ViewRequest, ViewResponse
from novelhub.services.views import ViewAccountingService, ViewResult, ViewScope

logger = logging.getLogger(__name__)

router = APIRouter(tags=["views"])


def get_view_service_dep(store: StoreDep) -> ViewAccountingService:
    """Return a view accounting service bound to the request session."""
    return ViewAccountingService(store)


ViewServiceDep = Annotated[ViewAccountingService, Depends(get_view_service_dep)]


def _set_view_cookie(response: Response, scope: ViewScope, result: ViewResult) -> None:
    response.set_cookie(
        key=scope.cookie_name,
        value=result.cookie_value or "",
        max_age=result.max_age,
        path="/",
        secure=settings.is_production,
        httponly=True,
        samesite="lax",
    )


@router.post("/views", response_model=ViewResponse)
async def record_view(
    request: Request,
    response: Response,
    view_service: ViewServiceDep,
    payload: Annotated[ViewRequest, Body()],
) -> ViewResponse | JSONResponse:
    """Count a view of a chapter (preferred) or novel at most once per day."""
    if payload.chapter_id and payload.chapter_id > 0:
        scope, entity_id = ViewScope.CHAPTER, payload.chapter_id
    elif payload.novel_id and payload.novel_id > 0:
        scope, entity_id = ViewScope.NOVEL, payload.novel_id
    else:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "error": "novelId or chapterId is required"},
        )

    try:
        result = view_service.record_view(scope, entity_id, request.cookies.get(scope.cookie_name))
        if result.cookie_value:
            _set_view_cookie(response, scope, result)
    except Exception:
        logger.exception("POST /views failed")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": "Failed to increment view"},
        )

    return ViewResponse(success=True, counted=result.counted)
