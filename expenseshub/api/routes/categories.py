from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from expenseshub.api.dependencies import get_category_flow
from expenseshub.models import Category
from expenseshub.orchestrator import CategoryFlow

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("", response_model=List[Category])
async def list_categories(
    type: Optional[str] = Query(default=None, description="expense or income"),
    flow: CategoryFlow = Depends(get_category_flow),
):
    """Categories sorted by display order."""
    return await flow.list_categories(type)


@router.post("", response_model=Category, status_code=status.HTTP_201_CREATED)
async def create_category(
    payload: Any = Body(default=None),
    flow: CategoryFlow = Depends(get_category_flow),
):
    return await flow.create_category(payload)
