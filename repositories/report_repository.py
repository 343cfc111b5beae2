"""
Saved report definitions repository.
"""

from typing import List, Optional

from sqlmodel import Session, col, or_, select

from models import Report


class ReportRepository:
    def __init__(self, session: Session):
        self.session = session

    def list_reports(self, user_id: str) -> List[Report]:
        """The user's own reports plus public ones, newest first."""
        statement = (
            select(Report)
            .where(or_(Report.user_id == user_id, Report.is_public == True))  # noqa: E712
            .order_by(col(Report.created_at).desc())
        )
        return list(self.session.exec(statement).all())

    def get_user_report(self, report_id: str, user_id: str) -> Optional[Report]:
        report = self.session.get(Report, report_id)
        if report is None or report.user_id != user_id:
            return None
        return report

    def create_report(self, user_id: str, **fields) -> Report:
        report = Report(user_id=user_id, **fields)
        self.session.add(report)
        self.session.commit()
        self.session.refresh(report)
        return report

    def delete_report(self, report: Report):
        self.session.delete(report)
        self.session.commit()
