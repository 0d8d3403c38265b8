"""
Press release endpoints (mounted at ``/press-release``).
"""

from typing import List

from fastapi import APIRouter, Depends, Response, status

from parkadmin.api.params import ListParams, list_params, paginated
from parkadmin.core.auth import AdminSession, get_current_active_session
from parkadmin.db.deps import DBSession
from parkadmin.schemas.common import DeleteResponse, ErrorResponse, NextSequenceResponse
from parkadmin.schemas.press_release import (
    PressReleaseCreate,
    PressReleaseMutationResponse,
    PressReleaseResponse,
    PressReleaseUpdate,
)
from parkadmin.services.content import PressReleaseService
from parkadmin.services.images import ImagePipeline, get_image_pipeline
from parkadmin.services.sequence import SequenceAllocator

router = APIRouter(prefix="/press-release", tags=["Press Releases"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid input or id"},
    404: {"model": ErrorResponse, "description": "Press release not found"},
    502: {"model": ErrorResponse, "description": "Database or image CDN failure"},
}


@router.get("", response_model=List[PressReleaseResponse])
async def list_press_releases(
    response: Response,
    db: DBSession,
    params: ListParams = Depends(list_params),
):
    rows = await PressReleaseService(db).list(params.criteria, params.sort, params.order)
    return [PressReleaseResponse.model_validate(p) for p in paginated(response, rows, params)]


@router.get("/next-seq", response_model=NextSequenceResponse)
async def next_press_release_seq(db: DBSession):
    seq = await SequenceAllocator(db).peek("press_releases")
    return NextSequenceResponse(resource="press_releases", seq=seq)


@router.get(
    "/{press_release_id}",
    response_model=PressReleaseResponse,
    responses=ERROR_RESPONSES,
)
async def get_press_release(press_release_id: str, db: DBSession):
    return PressReleaseResponse.model_validate(await PressReleaseService(db).get(press_release_id))


@router.post(
    "",
    response_model=PressReleaseMutationResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    summary="Create a press release",
)
async def create_press_release(
    data: PressReleaseCreate,
    db: DBSession,
    session: AdminSession = Depends(get_current_active_session),
    pipeline: ImagePipeline = Depends(get_image_pipeline),
):
    """
    Create a press release.

    The record is saved before the image is uploaded. If the upload fails
    the press release still exists (without image) and ``warning`` says why.
    """
    press_release, warning = await PressReleaseService(db, pipeline).create(data)
    return PressReleaseMutationResponse(
        message="Press release created successfully",
        press_release=PressReleaseResponse.model_validate(press_release),
        warning=warning,
    )


@router.patch(
    "/{press_release_id}",
    response_model=PressReleaseMutationResponse,
    responses=ERROR_RESPONSES,
)
async def update_press_release(
    press_release_id: str,
    data: PressReleaseUpdate,
    db: DBSession,
    session: AdminSession = Depends(get_current_active_session),
    pipeline: ImagePipeline = Depends(get_image_pipeline),
):
    press_release, warning = await PressReleaseService(db, pipeline).update(press_release_id, data)
    return PressReleaseMutationResponse(
        message="Press release updated successfully",
        press_release=PressReleaseResponse.model_validate(press_release),
        warning=warning,
    )


@router.delete(
    "/{press_release_ids}",
    response_model=DeleteResponse,
    responses=ERROR_RESPONSES,
)
async def delete_press_releases(
    press_release_ids: str,
    db: DBSession,
    session: AdminSession = Depends(get_current_active_session),
    pipeline: ImagePipeline = Depends(get_image_pipeline),
):
    result = await PressReleaseService(db, pipeline).delete(press_release_ids)
    count = len(result.deleted)
    return DeleteResponse(
        message=f"{count} press release{'s' if count != 1 else ''} deleted successfully",
        deleted=result.deleted,
        missing=result.missing,
        warning=result.warning,
    )
