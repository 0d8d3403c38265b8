"""
Category endpoints.
"""

from typing import List

from fastapi import APIRouter, Depends, Response, status

from parkadmin.api.params import ListParams, list_params, paginated
from parkadmin.core.auth import AdminSession, get_current_active_session
from parkadmin.db.deps import DBSession
from parkadmin.schemas.category import CategoryMutationResponse, CategoryResponse, CategoryWrite
from parkadmin.schemas.common import DeleteResponse, ErrorResponse
from parkadmin.services.content import CategoryService

router = APIRouter(prefix="/categories", tags=["Categories"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid input, id or duplicate name"},
    404: {"model": ErrorResponse, "description": "Category not found"},
}


@router.get("", response_model=List[CategoryResponse])
async def list_categories(
    response: Response,
    db: DBSession,
    params: ListParams = Depends(list_params),
):
    rows = await CategoryService(db).list(params.criteria, params.sort, params.order)
    return [CategoryResponse.model_validate(c) for c in paginated(response, rows, params)]


@router.get("/{category_id}", response_model=CategoryResponse, responses=ERROR_RESPONSES)
async def get_category(category_id: str, db: DBSession):
    return CategoryResponse.model_validate(await CategoryService(db).get(category_id))


@router.post(
    "",
    response_model=CategoryMutationResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def create_category(
    data: CategoryWrite,
    db: DBSession,
    session: AdminSession = Depends(get_current_active_session),
):
    category = await CategoryService(db).create(data)
    return CategoryMutationResponse(
        message="Category created successfully",
        category=CategoryResponse.model_validate(category),
    )


@router.patch("/{category_id}", response_model=CategoryMutationResponse, responses=ERROR_RESPONSES)
async def rename_category(
    category_id: str,
    data: CategoryWrite,
    db: DBSession,
    session: AdminSession = Depends(get_current_active_session),
):
    category = await CategoryService(db).update(category_id, data)
    return CategoryMutationResponse(
        message="Category updated successfully",
        category=CategoryResponse.model_validate(category),
    )


@router.delete("/{category_ids}", response_model=DeleteResponse, responses=ERROR_RESPONSES)
async def delete_categories(
    category_ids: str,
    db: DBSession,
    session: AdminSession = Depends(get_current_active_session),
):
    """Delete categories. Highlights that used them become uncategorized."""
    result = await CategoryService(db).delete(category_ids)
    count = len(result.deleted)
    return DeleteResponse(
        message=f"{count} {'category' if count == 1 else 'categories'} deleted successfully",
        deleted=result.deleted,
        missing=result.missing,
    )
