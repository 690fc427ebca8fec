# deckhub/storage/report/report_interface.py

from typing import Optional, Protocol

from deckhub.models.report import ReportReason
from deckhub.schemas.report import ReportOut, CommentReportOut


class IReportRepository(Protocol):
    """
    通报仓库接口协议：
    - 通报记录只追加，不修改
    - 审核阈值使用「不同通报人」计数
    """

    def create_deck_report(
        self, deck_id: str, reported_by: str, reason: ReportReason, details: Optional[str] = None
    ) -> ReportOut:
        ...

    def create_comment_report(
        self,
        deck_id: str,
        comment_id: str,
        reported_by: str,
        reason: ReportReason,
        details: Optional[str] = None,
    ) -> CommentReportOut:
        ...

    def count_distinct_deck_reporters(self, deck_id: str) -> int:
        ...

    def count_distinct_comment_reporters(self, comment_id: str) -> int:
        ...
