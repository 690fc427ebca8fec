# deckhub/storage/report/SQLAlchemyReportRepository.py

from typing import Optional

from sqlalchemy import func, distinct
from sqlalchemy.orm import Session

from deckhub.models.report import DeckReport, DeckCommentReport, ReportReason
from deckhub.schemas.report import ReportOut, CommentReportOut
from deckhub.storage.report.report_interface import IReportRepository
from deckhub.core.db import transaction
from deckhub.core.time import now_utc


class SQLAlchemyReportRepository(IReportRepository):
    """
    使用 SQLAlchemy 实现的通报仓库
    """

    def __init__(self, db: Session):
        self.db = db

    # ---------- 写入 ----------

    def create_deck_report(
        self, deck_id: str, reported_by: str, reason: ReportReason, details: Optional[str] = None
    ) -> ReportOut:
        report = DeckReport(
            deck_id=deck_id,
            reported_by=reported_by,
            reason=ReportReason(reason).value,
            details=details,
            created_at=now_utc(),
        )
        with transaction(self.db):
            self.db.add(report)

        self.db.refresh(report)
        return ReportOut.model_validate(report)

    def create_comment_report(
        self,
        deck_id: str,
        comment_id: str,
        reported_by: str,
        reason: ReportReason,
        details: Optional[str] = None,
    ) -> CommentReportOut:
        report = DeckCommentReport(
            deck_id=deck_id,
            comment_id=comment_id,
            reported_by=reported_by,
            reason=ReportReason(reason).value,
            details=details,
            created_at=now_utc(),
        )
        with transaction(self.db):
            self.db.add(report)

        self.db.refresh(report)
        return CommentReportOut.model_validate(report)

    # ---------- 计数 ----------

    def count_distinct_deck_reporters(self, deck_id: str) -> int:
        return (
            self.db.query(func.count(distinct(DeckReport.reported_by)))
            .filter(DeckReport.deck_id == deck_id)
            .scalar()
        ) or 0

    def count_distinct_comment_reporters(self, comment_id: str) -> int:
        return (
            self.db.query(func.count(distinct(DeckCommentReport.reported_by)))
            .filter(DeckCommentReport.comment_id == comment_id)
            .scalar()
        ) or 0
