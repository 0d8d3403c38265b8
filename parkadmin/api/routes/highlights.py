"""
Highlight endpoints.

Reads are public (the public site renders highlights); every mutation
requires an allowed admin session.
"""

from typing import List

from fastapi import APIRouter, Depends, Response, status

from parkadmin.api.params import ListParams, list_params, paginated
from parkadmin.core.auth import AdminSession, get_current_active_session
from parkadmin.db.deps import DBSession
from parkadmin.schemas.common import DeleteResponse, ErrorResponse, NextSequenceResponse
from parkadmin.schemas.highlight import (
    HighlightCreate,
    HighlightMutationResponse,
    HighlightResponse,
    HighlightStatusUpdate,
    HighlightUpdate,
)
from parkadmin.services.content import HighlightService
from parkadmin.services.images import ImagePipeline, get_image_pipeline
from parkadmin.services.sequence import SequenceAllocator

router = APIRouter(prefix="/highlights", tags=["Highlights"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid input or id"},
    404: {"model": ErrorResponse, "description": "Highlight not found"},
    502: {"model": ErrorResponse, "description": "Database or image CDN failure"},
}


@router.get(
    "",
    response_model=List[HighlightResponse],
    summary="List highlights",
)
async def list_highlights(
    response: Response,
    db: DBSession,
    params: ListParams = Depends(list_params),
):
    """
    List highlights, filtered and sorted in memory.

    ``x-total-count`` carries the number of matches before pagination.
    Default order is newest first.
    """
    rows = await HighlightService(db).list(params.criteria, params.sort, params.order)
    return [HighlightResponse.model_validate(h) for h in paginated(response, rows, params)]


@router.get(
    "/next-seq",
    response_model=NextSequenceResponse,
    summary="Preview the next sequence number",
)
async def next_highlight_seq(db: DBSession):
    seq = await SequenceAllocator(db).peek("highlights")
    return NextSequenceResponse(resource="highlights", seq=seq)


@router.get(
    "/{highlight_id}",
    response_model=HighlightResponse,
    responses=ERROR_RESPONSES,
)
async def get_highlight(highlight_id: str, db: DBSession):
    return HighlightResponse.model_validate(await HighlightService(db).get(highlight_id))


@router.post(
    "",
    response_model=HighlightMutationResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    summary="Create a highlight",
)
async def create_highlight(
    data: HighlightCreate,
    db: DBSession,
    session: AdminSession = Depends(get_current_active_session),
    pipeline: ImagePipeline = Depends(get_image_pipeline),
):
    """
    Create a highlight.

    ``seq`` is assigned by the server. Images may be data URIs (uploaded)
    or existing URLs (kept). Images that fail to upload are left out and
    reported in ``warning``; the highlight is still created.
    """
    highlight, warning = await HighlightService(db, pipeline).create(data, session.email)
    return HighlightMutationResponse(
        message="Highlight created successfully",
        highlight=HighlightResponse.model_validate(highlight),
        warning=warning,
    )


@router.patch(
    "/{highlight_id}",
    response_model=HighlightMutationResponse,
    responses=ERROR_RESPONSES,
    summary="Update a highlight",
)
async def update_highlight(
    highlight_id: str,
    data: HighlightUpdate,
    db: DBSession,
    session: AdminSession = Depends(get_current_active_session),
    pipeline: ImagePipeline = Depends(get_image_pipeline),
):
    highlight, warning = await HighlightService(db, pipeline).update(highlight_id, data)
    return HighlightMutationResponse(
        message="Highlight updated successfully",
        highlight=HighlightResponse.model_validate(highlight),
        warning=warning,
    )


@router.patch(
    "/{highlight_id}/status",
    response_model=HighlightMutationResponse,
    responses=ERROR_RESPONSES,
    summary="Publish, reject or re-draft a highlight",
)
async def update_highlight_status(
    highlight_id: str,
    data: HighlightStatusUpdate,
    db: DBSession,
    session: AdminSession = Depends(get_current_active_session),
):
    highlight = await HighlightService(db).set_status(highlight_id, data.status)
    return HighlightMutationResponse(
        message=f"Highlight status set to {data.status.value}",
        highlight=HighlightResponse.model_validate(highlight),
    )


@router.delete(
    "/{highlight_ids}",
    response_model=DeleteResponse,
    responses=ERROR_RESPONSES,
    summary="Delete one or more highlights",
)
async def delete_highlights(
    highlight_ids: str,
    db: DBSession,
    session: AdminSession = Depends(get_current_active_session),
    pipeline: ImagePipeline = Depends(get_image_pipeline),
):
    """
    Delete highlights by comma-joined ids.

    Records are deleted first; their images are then removed from the CDN
    on a best-effort basis. Ids that do not exist are listed in ``missing``.
    """
    result = await HighlightService(db, pipeline).delete(highlight_ids)
    count = len(result.deleted)
    return DeleteResponse(
        message=f"{count} highlight{'s' if count != 1 else ''} deleted successfully",
        deleted=result.deleted,
        missing=result.missing,
        warning=result.warning,
    )
