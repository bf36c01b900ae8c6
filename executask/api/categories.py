"""Category routes."""

from fastapi import APIRouter, Depends, Query, Response, status

from executask.api.dependencies import get_category_service
from executask.auth.dependencies import get_current_user
from executask.models.base import Page
from executask.models.category import Category, CreateCategoryPayload, UpdateCategoryPayload
from executask.models.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from executask.models.user import User
from executask.services.category_service import CategoryService

router = APIRouter(prefix="/categories", tags=["categories"])


@router.post("", response_model=Category, status_code=status.HTTP_201_CREATED)
def create_category(
    payload: CreateCategoryPayload,
    current_user: User = Depends(get_current_user),
    service: CategoryService = Depends(get_category_service),
):
    return service.create_category(current_user.id, payload)


@router.get("", response_model=Page[Category])
def list_categories(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    current_user: User = Depends(get_current_user),
    service: CategoryService = Depends(get_category_service),
):
    """List the current user's categories ordered by name."""
    return service.list_categories(current_user.id, page, limit)


@router.get("/{category_id}", response_model=Category)
def get_category(
    category_id: str,
    current_user: User = Depends(get_current_user),
    service: CategoryService = Depends(get_category_service),
):
    return service.get_category(current_user.id, category_id)


@router.patch("/{category_id}", response_model=Category)
def update_category(
    category_id: str,
    payload: UpdateCategoryPayload,
    current_user: User = Depends(get_current_user),
    service: CategoryService = Depends(get_category_service),
):
    return service.update_category(current_user.id, category_id, payload)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: str,
    current_user: User = Depends(get_current_user),
    service: CategoryService = Depends(get_category_service),
):
    """Delete a category; todos that referenced it keep existing without a category."""
    service.delete_category(current_user.id, category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
