import uuid
from enum import Enum

from sqlalchemy import Column, String, TIMESTAMP, Text, ForeignKey, Index

from deckhub.models.base import Base
from deckhub.core.time import now_utc


# 通报理由
class ReportReason(str, Enum):
    INAPPROPRIATE_CONTENT = "inappropriate_content"
    SPAM = "spam"
    COPYRIGHT = "copyright"
    OTHER = "other"


class DeckReport(Base):
    """ 卡组通报表。同一用户可以重复通报，审核阈值按「不同通报人」计数。

        CREATE TABLE IF NOT EXISTS deck_reports (
            id VARCHAR(36) PRIMARY KEY,
            deck_id VARCHAR(21) NOT NULL,                    -- FK -> published_decks.id
            reported_by VARCHAR(128) NOT NULL,
            reason VARCHAR(32) NOT NULL,                     -- inappropriate_content / spam / copyright / other
            details TEXT NULL,
            created_at TIMESTAMP NOT NULL
        );
        CREATE INDEX idx_deck_reports_deck_reporter ON deck_reports (deck_id, reported_by);
    """

    __tablename__ = "deck_reports"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    deck_id = Column(String(21), ForeignKey("published_decks.id"), nullable=False)
    reported_by = Column(String(128), nullable=False)
    reason = Column(String(32), nullable=False)
    details = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=now_utc)

    __table_args__ = (
        Index("idx_deck_reports_deck_reporter", "deck_id", "reported_by"),
    )


class DeckCommentReport(Base):
    """ 评论通报表，结构与卡组通报相同，目标多一个 comment_id。

        CREATE TABLE IF NOT EXISTS deck_comment_reports (
            id VARCHAR(36) PRIMARY KEY,
            deck_id VARCHAR(21) NOT NULL,
            comment_id VARCHAR(36) NOT NULL,                 -- FK -> deck_comments.id
            reported_by VARCHAR(128) NOT NULL,
            reason VARCHAR(32) NOT NULL,
            details TEXT NULL,
            created_at TIMESTAMP NOT NULL
        );
    """

    __tablename__ = "deck_comment_reports"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    deck_id = Column(String(21), nullable=False)
    comment_id = Column(String(36), ForeignKey("deck_comments.id"), nullable=False)
    reported_by = Column(String(128), nullable=False)
    reason = Column(String(32), nullable=False)
    details = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=now_utc)

    __table_args__ = (
        Index("idx_deck_comment_reports_comment_reporter", "comment_id", "reported_by"),
    )
