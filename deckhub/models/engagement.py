from sqlalchemy import Column, String, ForeignKey, Index

from deckhub.models.base import Base, PreciseTimestamp
from deckhub.core.time import now_utc


class DeckLike(Base):
    """ 点赞表，主键由 (deck_id, user_id) 组成：
        同一用户对同一卡组最多一条记录，去重检查不需要二级索引。

        CREATE TABLE IF NOT EXISTS deck_likes (
            deck_id VARCHAR(21) NOT NULL,                    -- FK -> published_decks.id
            user_id VARCHAR(128) NOT NULL,                   -- 点赞用户
            created_at TIMESTAMP(6) NOT NULL,                -- 点赞时间（"我点赞的卡组" 按此倒序）
            PRIMARY KEY (deck_id, user_id)
        );
        CREATE INDEX idx_deck_likes_user_created ON deck_likes (user_id, created_at);
    """

    __tablename__ = "deck_likes"

    deck_id = Column(String(21), ForeignKey("published_decks.id"), primary_key=True)
    user_id = Column(String(128), primary_key=True)
    created_at = Column(PreciseTimestamp, nullable=False, default=now_utc)

    __table_args__ = (
        Index("idx_deck_likes_user_created", "user_id", "created_at"),
    )


class DeckView(Base):
    """ 浏览记录表，每个 (deck_id, user_id) 只记录第一次浏览，永不删除（除所有者删除卡组）。

        CREATE TABLE IF NOT EXISTS deck_views (
            deck_id VARCHAR(21) NOT NULL,
            user_id VARCHAR(128) NOT NULL,
            created_at TIMESTAMP(6) NOT NULL,
            PRIMARY KEY (deck_id, user_id)
        );
    """

    __tablename__ = "deck_views"

    deck_id = Column(String(21), ForeignKey("published_decks.id"), primary_key=True)
    user_id = Column(String(128), primary_key=True)
    created_at = Column(PreciseTimestamp, nullable=False, default=now_utc)
