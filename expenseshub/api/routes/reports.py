from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from expenseshub.api.dependencies import get_report_flow
from expenseshub.models import BreakdownReport, PeriodType, TransactionType
from expenseshub.orchestrator import ReportFlow

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/breakdown", response_model=BreakdownReport)
async def get_breakdown(
    period: str = Query(default=PeriodType.MONTHLY.value),
    date: Optional[datetime] = Query(default=None, description="Any instant inside the period"),
    type: str = Query(default=TransactionType.EXPENSE.value),
    flow: ReportFlow = Depends(get_report_flow),
):
    """Category breakdown plus income/expense summary for one period."""
    return await flow.breakdown_report(period, date, type)
