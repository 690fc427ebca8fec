import uuid

from sqlalchemy import Column, String, Boolean, TIMESTAMP, Text, ForeignKey, Index

from deckhub.models.base import Base, PreciseTimestamp
from deckhub.core.time import now_utc


class DeckComment(Base):
    """ 卡组评论表。评论只做软删除（作者删除或审核隐藏），不做硬删除。

        CREATE TABLE IF NOT EXISTS deck_comments (
            id VARCHAR(36) PRIMARY KEY,                      -- UUID
            deck_id VARCHAR(21) NOT NULL,                    -- FK -> published_decks.id
            user_id VARCHAR(128) NOT NULL,                   -- 评论作者
            user_name VARCHAR(100) NOT NULL,                 -- 评论时的作者显示名
            text TEXT NOT NULL,
            is_deleted BOOLEAN NOT NULL DEFAULT FALSE,
            created_at TIMESTAMP(6) NOT NULL,
            deleted_at TIMESTAMP NULL
        );
        CREATE INDEX idx_deck_comments_deck_created ON deck_comments (deck_id, created_at);
    """

    __tablename__ = "deck_comments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    deck_id = Column(String(21), ForeignKey("published_decks.id"), nullable=False)
    user_id = Column(String(128), nullable=False)
    user_name = Column(String(100), nullable=False, default="")
    text = Column(Text, nullable=False)
    is_deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(PreciseTimestamp, nullable=False, default=now_utc)
    deleted_at = Column(TIMESTAMP(timezone=True), nullable=True)

    __table_args__ = (
        Index("idx_deck_comments_deck_created", "deck_id", "created_at"),
    )
