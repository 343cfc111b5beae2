"""
Heuristic "AI" routes: insights, spending predictions, anomalies and recommendations.

When an OpenAI key is configured the insights gain a short narrative summary.
"""

import logging
from datetime import datetime, timedelta

from fastapi import APIRouter, Depends
from openai import OpenAIError
from sqlmodel import Session

from analytics import FinanceAnalyzer
from auth_service import get_current_user
from constants import TransactionType
from models import User
from openai_client import OpenAIClient
from repositories import BudgetRepository, TransactionRepository, UserRepository, WalletRepository
from sqlalchemy_db import get_db_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["ai"])

analyzer = FinanceAnalyzer()

INSIGHT_WINDOW_DAYS = 30
HISTORY_WINDOW_DAYS = 90


def _recent_rows(session: Session, user: User, days: int, type: str = None):
    wallet_ids = WalletRepository(session).get_user_wallet_ids(user.id)
    return TransactionRepository(session).list_rows(
        wallet_ids, start=datetime.now() - timedelta(days=days), type=type
    )


def _narrative_insight(session: Session, user: User, rows, insights):
    """Ask OpenAI for a narrative when configured and allowed; None otherwise."""
    if not OpenAIClient.is_configured():
        return None
    preferences = UserRepository(session).get_preferences_dict(user.id)
    if not preferences["ai_preferences"].get("insights", True):
        return None

    try:
        narrative = OpenAIClient().narrate_insights(analyzer.totals(rows), insights)
    except OpenAIError as e:
        logger.warning("OpenAI narrative failed for user %s: %s", user.id, e)
        return None
    return {"type": "ai_summary", "title": "Summary", "message": narrative, "priority": "normal"}


@router.get("/insights")
def get_insights(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """
    Rule-based insights over the last 30 days and the user's active budgets.

    Returns:
        Insights list and the period analysed
    """
    rows = _recent_rows(session, current_user, INSIGHT_WINDOW_DAYS)
    budgets = BudgetRepository(session).list_user_budgets(current_user.id)
    insights = analyzer.generate_insights(rows, budgets)

    narrative = _narrative_insight(session, current_user, rows, insights)
    if narrative:
        insights.append(narrative)
    return {"period_days": INSIGHT_WINDOW_DAYS, "insights": insights}


@router.get("/predictions/spending")
def predict_spending(
    period: str = "next_month",
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """Predict next month's spending from the average of the last three months."""
    rows = _recent_rows(
        session, current_user, HISTORY_WINDOW_DAYS, type=TransactionType.EXPENSE.value
    )
    return analyzer.predict_spending(rows, months=HISTORY_WINDOW_DAYS // 30, period=period)


@router.get("/anomalies")
def detect_anomalies(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    """Expenses of the last 90 days that stand out by z-score."""
    rows = _recent_rows(
        session, current_user, HISTORY_WINDOW_DAYS, type=TransactionType.EXPENSE.value
    )
    anomalies = analyzer.detect_spending_spikes(rows)
    for anomaly in anomalies:
        anomaly["date"] = anomaly["date"].isoformat()
    return {"analyzed_transactions": len(rows), "anomalies": anomalies}


@router.get("/recommendations")
def get_recommendations(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
):
    rows = _recent_rows(session, current_user, INSIGHT_WINDOW_DAYS)
    budgets = BudgetRepository(session).list_user_budgets(current_user.id)
    return {"recommendations": analyzer.recommendations(rows, budgets)}
