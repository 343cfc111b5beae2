"""
Report routes: aggregated views over every wallet the user belongs to, plus saved report definitions.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel, Field
from sqlmodel import Session

from analytics import FinanceAnalyzer
from auth_service import get_current_user
from constants import TransactionType
from models import User
from repositories import ReportRepository, TransactionRepository, WalletRepository
from sqlalchemy_db import get_db_session
from utils import resolve_date_range, shift_month

router = APIRouter(prefix="/api/reports", tags=["reports"])

analyzer = FinanceAnalyzer()


class ReportCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    type: str = Field(min_length=1, max_length=50)
    config: dict = Field(default_factory=dict)
    schedule: Optional[str] = None
    is_public: bool = False


def _user_rows(
    session: Session,
    user: User,
    start_date: Optional[datetime],
    end_date: Optional[datetime],
):
    try:
        start, end = resolve_date_range(start_date, end_date)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    wallet_ids = WalletRepository(session).get_user_wallet_ids(user.id)
    rows = TransactionRepository(session).list_rows(wallet_ids, start=start, end=end)
    return wallet_ids, rows, start, end


@router.get("/financial-summary")
def financial_summary(
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """
    Income, expenses and net cash flow across all of the user's wallets.

    Defaults to the last 30 days.
    """
    wallet_ids, rows, start, end = _user_rows(session, current_user, start_date, end_date)
    summary = analyzer.totals(rows)
    summary["wallet_count"] = len(wallet_ids)
    summary["start_date"] = start.isoformat()
    summary["end_date"] = end.isoformat()
    return summary


@router.get("/spending-analysis")
def spending_analysis(
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """Total and average spending with the top five expense categories."""
    _, rows, _, _ = _user_rows(session, current_user, start_date, end_date)
    return analyzer.spending_analysis(rows, top_n=5)


@router.get("/category-breakdown")
def category_breakdown(
    type: TransactionType = TransactionType.EXPENSE,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    _, rows, _, _ = _user_rows(session, current_user, start_date, end_date)
    return {"type": type.value, "categories": analyzer.category_breakdown(rows, type.value)}


@router.get("/trends")
def spending_trends(
    months: int = Query(6, ge=1, le=24),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """Monthly income, expenses and net for the last ``months`` calendar months, oldest first."""
    today = datetime.now()
    year, month = shift_month(today.year, today.month, -(months - 1))
    start = datetime(year, month, 1)

    wallet_ids = WalletRepository(session).get_user_wallet_ids(current_user.id)
    rows = TransactionRepository(session).list_rows(wallet_ids, start=start, end=today)
    return {"months": months, "trends": analyzer.monthly_trends(rows, months=months, today=today)}


@router.get("/saved")
def list_saved_reports(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    return [report.to_dict() for report in ReportRepository(session).list_reports(current_user.id)]


@router.post("/saved", status_code=status.HTTP_201_CREATED)
def create_saved_report(
    request: ReportCreateRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    report = ReportRepository(session).create_report(current_user.id, **request.model_dump())
    return report.to_dict()


@router.delete("/saved/{report_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_saved_report(
    report_id: str,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    repository = ReportRepository(session)
    report = repository.get_user_report(report_id, current_user.id)
    if report is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Report not found")
    repository.delete_report(report)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
