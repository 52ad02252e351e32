"""API router aggregation."""

from fastapi import APIRouter, Depends

from todoboard.api.auth import verify_api_key
from todoboard.api.todos import router as todos_router
from todoboard.api.categories import router as categories_router

router = APIRouter(prefix="/api", dependencies=[Depends(verify_api_key)])

router.include_router(todos_router)
router.include_router(categories_router)
