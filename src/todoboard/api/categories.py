"""Category API endpoints."""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from todoboard.api.auth import CurrentUser
from todoboard.api.errors import http_error, not_found
from todoboard.api.limiter import get_default_rate_limit, limiter
from todoboard.database import get_db
from todoboard.schemas.category import (
    CategoryCreate,
    CategoryUpdate,
    CategoryResponse,
)
from todoboard.services.exceptions import TodoBoardError
from todoboard.services.todo_service import CategoryService

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=list[CategoryResponse])
async def list_categories(
    user_id: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    """List the current user's categories by name."""
    service = CategoryService(db, user_id)
    try:
        categories = await service.get_all()
    except TodoBoardError as e:
        raise http_error(e) from e
    return [CategoryResponse.model_validate(c) for c in categories]


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(get_default_rate_limit)
async def create_category(
    request: Request,
    data: CategoryCreate,
    user_id: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    """Create a new category."""
    service = CategoryService(db, user_id)
    try:
        category = await service.create(name=data.name, color=data.color)
    except TodoBoardError as e:
        raise http_error(e) from e
    return CategoryResponse.model_validate(category)


@router.post("/defaults", response_model=list[CategoryResponse])
@limiter.limit(get_default_rate_limit)
async def seed_default_categories(
    request: Request,
    user_id: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    """Create the default categories when the user has none yet."""
    service = CategoryService(db, user_id)
    try:
        await service.seed_defaults()
        categories = await service.get_all()
    except TodoBoardError as e:
        raise http_error(e) from e
    return [CategoryResponse.model_validate(c) for c in categories]


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(
    category_id: str,
    user_id: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    """Get a category by ID."""
    service = CategoryService(db, user_id)
    try:
        category = await service.get_by_id(category_id)
    except TodoBoardError as e:
        raise http_error(e) from e
    if not category:
        raise not_found("Category")
    return CategoryResponse.model_validate(category)


@router.put("/{category_id}", response_model=CategoryResponse)
@limiter.limit(get_default_rate_limit)
async def update_category(
    request: Request,
    category_id: str,
    data: CategoryUpdate,
    user_id: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    """Update a category."""
    service = CategoryService(db, user_id)
    update_data = data.model_dump(exclude_unset=True)
    try:
        category = await service.update(category_id, **update_data)
    except TodoBoardError as e:
        raise http_error(e) from e
    if not category:
        raise not_found("Category")
    return CategoryResponse.model_validate(category)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(get_default_rate_limit)
async def delete_category(
    request: Request,
    category_id: str,
    user_id: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    """Delete a category and its todo associations."""
    service = CategoryService(db, user_id)
    try:
        deleted = await service.delete(category_id)
    except TodoBoardError as e:
        raise http_error(e) from e
    if not deleted:
        raise not_found("Category")
