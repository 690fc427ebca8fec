from typing import Optional
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from deckhub.models.report import ReportReason


class ReportCreate(BaseModel):
    reason: ReportReason
    details: Optional[str] = Field(default=None, max_length=1000)

    model_config = ConfigDict(extra="forbid")


class ReportOut(BaseModel):
    id: str
    deck_id: str
    reported_by: str
    reason: ReportReason
    details: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CommentReportOut(ReportOut):
    comment_id: str

    model_config = ConfigDict(from_attributes=True)


class ReportResultOut(BaseModel):
    """
    通报处理结果：
    - distinct_reporters: 写入本次通报后的不同通报人数
    - hidden: 本次通报是否触发了自动隐藏
    """
    report_id: str
    distinct_reporters: int
    hidden: bool
