"""
Newsletter subscriber endpoints.

``POST /subscribers`` is the public sign-up form. Everything else is for
the admin panel.
"""

from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Response, status

from parkadmin.api.params import ListParams, list_params, paginated
from parkadmin.core.auth import AdminSession, get_current_active_session
from parkadmin.core.logging import get_logger
from parkadmin.db.deps import DBSession
from parkadmin.schemas.common import DeleteResponse, ErrorResponse, NextSequenceResponse
from parkadmin.schemas.subscriber import (
    SubscriberCreate,
    SubscriberMutationResponse,
    SubscriberResponse,
)
from parkadmin.services.content import SubscriberService
from parkadmin.services.export import export_filename, subscribers_to_csv
from parkadmin.services.sequence import SequenceAllocator

logger = get_logger(__name__)

router = APIRouter(prefix="/subscribers", tags=["Subscribers"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid or duplicate email, invalid id"},
    404: {"model": ErrorResponse, "description": "Subscriber not found"},
}


@router.get("", response_model=List[SubscriberResponse])
async def list_subscribers(
    response: Response,
    db: DBSession,
    params: ListParams = Depends(list_params),
    session: AdminSession = Depends(get_current_active_session),
):
    """List subscribers; newest (highest seq) first by default."""
    rows = await SubscriberService(db).list(params.criteria, params.sort, params.order)
    return [SubscriberResponse.model_validate(s) for s in paginated(response, rows, params)]


@router.get(
    "/export",
    response_class=Response,
    responses={200: {"content": {"text/csv": {}}}},
    summary="Download subscribers as CSV",
)
async def export_subscribers(
    db: DBSession,
    params: ListParams = Depends(list_params),
    session: AdminSession = Depends(get_current_active_session),
):
    """Export the subscribers matching the list filters (no pagination)."""
    rows = await SubscriberService(db).list(params.criteria, params.sort, params.order)
    filename = export_filename(date.today())

    logger.info("subscribers_exported", count=len(rows), by=session.email)

    return Response(
        content=subscribers_to_csv(rows),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/next-seq", response_model=NextSequenceResponse)
async def next_subscriber_seq(
    db: DBSession,
    session: AdminSession = Depends(get_current_active_session),
):
    seq = await SequenceAllocator(db).peek("subscribers")
    return NextSequenceResponse(resource="subscribers", seq=seq)


@router.get("/{subscriber_id}", response_model=SubscriberResponse, responses=ERROR_RESPONSES)
async def get_subscriber(
    subscriber_id: str,
    db: DBSession,
    session: AdminSession = Depends(get_current_active_session),
):
    return SubscriberResponse.model_validate(await SubscriberService(db).get(subscriber_id))


@router.post(
    "",
    response_model=SubscriberMutationResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    summary="Subscribe to the newsletter",
)
async def create_subscriber(data: SubscriberCreate, db: DBSession):
    subscriber = await SubscriberService(db).create(data)
    return SubscriberMutationResponse(
        message="Subscribed successfully",
        subscriber=SubscriberResponse.model_validate(subscriber),
    )


@router.patch("/{subscriber_id}", response_model=SubscriberMutationResponse, responses=ERROR_RESPONSES)
async def update_subscriber(
    subscriber_id: str,
    data: SubscriberCreate,
    db: DBSession,
    session: AdminSession = Depends(get_current_active_session),
):
    subscriber = await SubscriberService(db).update(subscriber_id, data)
    return SubscriberMutationResponse(
        message="Subscriber updated successfully",
        subscriber=SubscriberResponse.model_validate(subscriber),
    )


@router.delete("/{subscriber_ids}", response_model=DeleteResponse, responses=ERROR_RESPONSES)
async def delete_subscribers(
    subscriber_ids: str,
    db: DBSession,
    session: AdminSession = Depends(get_current_active_session),
):
    result = await SubscriberService(db).delete(subscriber_ids)
    count = len(result.deleted)
    return DeleteResponse(
        message=f"{count} subscriber{'s' if count != 1 else ''} deleted successfully",
        deleted=result.deleted,
        missing=result.missing,
    )
