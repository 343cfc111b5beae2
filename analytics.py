"""
Spending analytics heuristics used by the report, budget and AI routes.

The analyzer works on flat transaction rows (dictionaries with ``category``,
``amount`` in dollars, ``type`` and ``date``) so it stays independent of the
database layer.
"""

from __future__ import annotations

import math
import statistics
from collections import defaultdict
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from constants import TransactionType
from utils import month_key, shift_month

INCOME = TransactionType.INCOME.value
EXPENSE = TransactionType.EXPENSE.value


@dataclass
class Insight:
    """A single human-readable finding."""

    type: str
    title: str
    message: str
    priority: str = "normal"
    data: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        return {k: v for k, v in data.items() if v is not None}


class FinanceAnalyzer:
    """Rule-based analytics over transaction rows."""

    def __init__(
        self,
        spike_sigma: float = 2.0,
        minimum_spike_amount: float = 100.0,
        budget_buffer: float = 0.10,
        prediction_growth: float = 1.05,
        prediction_confidence: float = 0.75,
    ) -> None:
        self._spike_sigma = spike_sigma
        self._minimum_spike_amount = minimum_spike_amount
        self._budget_buffer = budget_buffer
        self._prediction_growth = prediction_growth
        self._prediction_confidence = prediction_confidence

    @staticmethod
    def _of_type(rows: List[Dict[str, Any]], tx_type: str) -> List[Dict[str, Any]]:
        return [row for row in rows if row.get("type") == tx_type]

    def totals(self, rows: List[Dict[str, Any]]) -> Dict[str, float]:
        income = sum(float(row["amount"]) for row in self._of_type(rows, INCOME))
        expenses = sum(float(row["amount"]) for row in self._of_type(rows, EXPENSE))
        return {
            "total_income": round(income, 2),
            "total_expenses": round(expenses, 2),
            "net_cash_flow": round(income - expenses, 2),
            "transaction_count": len(rows),
        }

    def category_totals(self, rows: List[Dict[str, Any]], tx_type: str = EXPENSE) -> Dict[str, float]:
        totals: Dict[str, float] = defaultdict(float)
        for row in self._of_type(rows, tx_type):
            totals[row["category"]] += float(row.get("amount", 0))
        return {cat: round(total, 2) for cat, total in totals.items()}

    def category_breakdown(
        self, rows: List[Dict[str, Any]], tx_type: str = EXPENSE
    ) -> List[Dict[str, Any]]:
        """Per-category total, count and share of the type's total, largest first."""
        counts: Dict[str, int] = defaultdict(int)
        for row in self._of_type(rows, tx_type):
            counts[row["category"]] += 1

        totals = self.category_totals(rows, tx_type)
        grand_total = sum(totals.values())
        breakdown = [
            {
                "category": category,
                "total": total,
                "count": counts[category],
                "percentage": round(total / grand_total * 100, 2) if grand_total > 0 else 0,
            }
            for category, total in totals.items()
        ]
        return sorted(breakdown, key=lambda item: item["total"], reverse=True)

    def spending_analysis(self, rows: List[Dict[str, Any]], top_n: int = 5) -> Dict[str, Any]:
        breakdown = self.category_breakdown(rows, EXPENSE)
        expenses = self._of_type(rows, EXPENSE)
        total = round(sum(float(row["amount"]) for row in expenses), 2)
        return {
            "total_expenses": total,
            "transaction_count": len(expenses),
            "average_transaction": round(total / len(expenses), 2) if expenses else 0,
            "top_categories": breakdown[:top_n],
        }

    def monthly_trends(
        self, rows: List[Dict[str, Any]], months: int = 6, today: Optional[datetime] = None
    ) -> List[Dict[str, Any]]:
        """
        Income, expenses and net per calendar month for the last ``months`` months.

        Months without transactions are included with zeros, oldest first.
        """
        today = today or datetime.now()
        keys = []
        for offset in range(months - 1, -1, -1):
            year, month = shift_month(today.year, today.month, -offset)
            keys.append(f"{year:04d}-{month:02d}")

        buckets = {key: {"income": 0.0, "expenses": 0.0} for key in keys}
        for row in rows:
            key = month_key(row["date"])
            if key not in buckets:
                continue
            field = "income" if row["type"] == INCOME else "expenses"
            buckets[key][field] += float(row["amount"])

        return [
            {
                "month": key,
                "income": round(values["income"], 2),
                "expenses": round(values["expenses"], 2),
                "net": round(values["income"] - values["expenses"], 2),
            }
            for key, values in buckets.items()
        ]

    def predict_spending(
        self, rows: List[Dict[str, Any]], months: int = 3, period: str = "next_month"
    ) -> Dict[str, Any]:
        """Next-period spending: average monthly expenses over ``months`` months plus growth."""
        expenses = sum(float(row["amount"]) for row in self._of_type(rows, EXPENSE))
        average = expenses / months if months else 0
        return {
            "period": period,
            "predicted_amount": round(average * self._prediction_growth),
            "average_monthly_expenses": round(average, 2),
            "based_on_months": months,
            "confidence": self._prediction_confidence,
        }

    def detect_spending_spikes(self, expenses: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Detect outliers using Z-score heuristics to highlight unusual spends.
        """
        if not expenses:
            return []

        amounts = [float(exp.get("amount", 0)) for exp in expenses]
        mean = statistics.fmean(amounts)
        stdev = statistics.pstdev(amounts)

        anomalies: List[Dict[str, Any]] = []
        for exp in expenses:
            amount = float(exp.get("amount", 0))
            if amount < self._minimum_spike_amount:
                continue
            if stdev == 0:
                z_score = 0.0
            else:
                z_score = (amount - mean) / stdev
            if z_score >= self._spike_sigma:
                anomaly = dict(exp)
                anomaly["z_score"] = round(z_score, 2)
                anomaly["average_amount"] = round(mean, 2)
                anomalies.append(anomaly)
        return anomalies

    def suggest_budgets(self, expenses: List[Dict[str, Any]], months: int = 3) -> List[Dict[str, Any]]:
        """
        Suggest a monthly budget per category from recent spending.

        The suggestion is the monthly average over ``months`` months plus a
        buffer, rounded up to a whole amount.
        """
        totals: Dict[str, float] = defaultdict(float)
        category_ids: Dict[str, Optional[str]] = {}
        for exp in self._of_type(expenses, EXPENSE):
            totals[exp["category"]] += float(exp["amount"])
            category_ids[exp["category"]] = exp.get("category_id")

        suggestions = []
        for category, total in totals.items():
            monthly_average = total / months if months else total
            suggested = math.ceil(round(monthly_average * (1 + self._budget_buffer), 2))
            suggestions.append(
                {
                    "category_id": category_ids[category],
                    "category": category,
                    "total_spent": round(total, 2),
                    "monthly_average": round(monthly_average, 2),
                    "suggested_amount": suggested,
                    "reasoning": (
                        f"You spent {total:.2f} on {category} over the last {months} months, "
                        f"about {monthly_average:.2f} per month. A budget of {suggested} "
                        f"leaves a {int(self._budget_buffer * 100)}% buffer."
                    ),
                }
            )
        return sorted(suggestions, key=lambda item: item["total_spent"], reverse=True)

    @staticmethod
    def budget_health(budgets: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Score budgets from 100, losing 20 points per exceeded budget.

        Args:
            budgets: Budget dictionaries carrying ``amount`` and ``spent``
        """
        exceeded = [b for b in budgets if b["spent"] > b["amount"]]
        score = max(0, 100 - 20 * len(exceeded))
        if score > 80:
            status = "excellent"
        elif score > 60:
            status = "good"
        else:
            status = "needs_attention"

        recommendations = [
            f"Budget '{b['name']}' is over by {b['spent'] - b['amount']:.2f}. Review its items."
            for b in exceeded
        ]
        if not recommendations:
            recommendations.append("All budgets are within their limits.")

        return {
            "health_score": score,
            "status": status,
            "total_budgets": len(budgets),
            "exceeded_budgets": len(exceeded),
            "on_track_budgets": len(budgets) - len(exceeded),
            "recommendations": recommendations,
        }

    def generate_insights(
        self, rows: List[Dict[str, Any]], budgets: Optional[List[Dict[str, Any]]] = None
    ) -> List[Dict[str, Any]]:
        """Rule-based insights: top category, savings rate and budgets over their limit."""
        insights: List[Insight] = []
        totals = self.totals(rows)
        breakdown = self.category_breakdown(rows, EXPENSE)

        if breakdown:
            top = breakdown[0]
            insights.append(
                Insight(
                    type="top_category",
                    title="Top spending category",
                    message=(
                        f"{top['category']} accounts for {top['percentage']}% of your spending "
                        f"({top['total']:.2f})."
                    ),
                    data={"category": top["category"], "total": top["total"]},
                )
            )

        income = totals["total_income"]
        if income > 0:
            savings_rate = round(totals["net_cash_flow"] / income * 100, 2)
            if savings_rate < 0:
                message = f"You spent {abs(totals['net_cash_flow']):.2f} more than you earned."
                priority = "high"
            elif savings_rate < 20:
                message = f"You saved {savings_rate}% of your income. Aim for at least 20%."
                priority = "normal"
            else:
                message = f"Great job! You saved {savings_rate}% of your income."
                priority = "low"
            insights.append(
                Insight(
                    type="savings_rate",
                    title="Savings rate",
                    message=message,
                    priority=priority,
                    data={"savings_rate": savings_rate},
                )
            )

        for budget in budgets or []:
            if budget["spent"] > budget["amount"]:
                insights.append(
                    Insight(
                        type="budget_exceeded",
                        title="Budget exceeded",
                        message=(
                            f"'{budget['name']}' is at {budget['percent_used']}% of its limit."
                        ),
                        priority="high",
                        data={"budget_id": budget["id"]},
                    )
                )

        if not insights:
            insights.append(
                Insight(
                    type="getting_started",
                    title="Not enough data yet",
                    message="Record a few transactions to start seeing insights.",
                    priority="low",
                )
            )
        return [insight.to_dict() for insight in insights]

    def recommendations(
        self, rows: List[Dict[str, Any]], budgets: Optional[List[Dict[str, Any]]] = None
    ) -> List[Dict[str, Any]]:
        """Actionable suggestions derived from cash flow, budgets and category shares."""
        results: List[Dict[str, Any]] = []
        totals = self.totals(rows)

        if totals["net_cash_flow"] > 0:
            suggested = round(totals["net_cash_flow"] * 0.5, 2)
            results.append(
                {
                    "type": "savings_goal",
                    "title": "Start a savings goal",
                    "message": (
                        f"You have a surplus of {totals['net_cash_flow']:.2f}. "
                        f"Consider putting {suggested:.2f} toward a savings goal."
                    ),
                    "suggested_amount": suggested,
                }
            )

        for budget in budgets or []:
            if budget["spent"] > budget["amount"]:
                results.append(
                    {
                        "type": "review_budget",
                        "title": f"Review '{budget['name']}'",
                        "message": "This budget is over its limit. Adjust the plan or cut back.",
                        "budget_id": budget["id"],
                    }
                )

        for item in self.category_breakdown(rows, EXPENSE):
            if item["percentage"] > 30:
                results.append(
                    {
                        "type": "reduce_category",
                        "title": f"Reduce {item['category']} spending",
                        "message": (
                            f"{item['category']} is {item['percentage']}% of your spending. "
                            "Cutting it by 10% would noticeably improve your cash flow."
                        ),
                        "category": item["category"],
                        "potential_savings": round(item["total"] * 0.1, 2),
                    }
                )
        return results
