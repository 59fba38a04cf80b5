from datetime import datetime
from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, Query, Response, status

from expenseshub.api.dependencies import get_transaction_flow
from expenseshub.models import PeriodType, Transaction, TransactionView
from expenseshub.orchestrator import TransactionFlow

router = APIRouter(prefix="/transactions", tags=["Transactions"])


@router.get("", response_model=List[TransactionView])
async def list_transactions(
    start_date: Optional[datetime] = Query(default=None, alias="startDate"),
    end_date: Optional[datetime] = Query(default=None, alias="endDate"),
    type: Optional[str] = Query(default=None),
    flow: TransactionFlow = Depends(get_transaction_flow),
):
    """
    Transactions newest first, each with its category embedded.

    startDate is inclusive, endDate exclusive.
    """
    return await flow.list_transactions(start_date, end_date, type)


@router.post("", response_model=Transaction, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    payload: Any = Body(default=None),
    flow: TransactionFlow = Depends(get_transaction_flow),
):
    return await flow.create_transaction(payload)


@router.get("/export")
async def export_transactions(
    period: str = Query(default=PeriodType.MONTHLY.value),
    date: Optional[datetime] = Query(default=None),
    flow: TransactionFlow = Depends(get_transaction_flow),
):
    """CSV download of one period's transactions."""
    filename, content = await flow.export_csv(period, date)
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.patch("/{transaction_id}", response_model=Transaction)
async def update_transaction(
    transaction_id: str,
    payload: Any = Body(default=None),
    flow: TransactionFlow = Depends(get_transaction_flow),
):
    return await flow.update_transaction(transaction_id, payload)


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_transaction(
    transaction_id: str,
    flow: TransactionFlow = Depends(get_transaction_flow),
):
    await flow.delete_transaction(transaction_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
