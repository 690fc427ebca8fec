from sqlalchemy import Column, Integer, String, Boolean, TIMESTAMP, Text, JSON, ForeignKey, Index
from sqlalchemy.orm import relationship

from deckhub.models.base import Base, PreciseTimestamp
from deckhub.core.time import now_utc


class PublishedDeck(Base):
    """ 公开卡组表，存储卡组内容、可见性以及点赞数 / 浏览数等计数器。

        CREATE TABLE IF NOT EXISTS published_decks (
            id VARCHAR(21) PRIMARY KEY,                      -- 调用方生成的公开 ID（21 位 token）
            user_id VARCHAR(128) NOT NULL,                   -- 发布者
            user_name VARCHAR(100) NOT NULL,                 -- 发布时的作者显示名
            deck JSON NOT NULL,                              -- 卡组本体（名称、18 个卡槽、王牌卡槽...）
            song_id VARCHAR(64) NULL,                        -- 从卡组本体冗余出来，用于筛选
            comment TEXT NULL,                               -- 发布者说明
            hashtags JSON NOT NULL,                          -- 规范化后的话题标签（均以 # 开头）
            image_urls JSON NOT NULL,                        -- 0~3 张图片
            thumbnail VARCHAR(512) NULL,                     -- 缩略图
            is_unlisted BOOLEAN NOT NULL DEFAULT FALSE,      -- 不公开（不出现在公共列表）
            is_deleted BOOLEAN NOT NULL DEFAULT FALSE,       -- 软删除 / 审核隐藏
            view_count INT NOT NULL DEFAULT 0,               -- 浏览数（= deck_views 行数）
            like_count INT NOT NULL DEFAULT 0,               -- 点赞数（= deck_likes 行数）
            published_at TIMESTAMP(6) NOT NULL,
            created_at TIMESTAMP NOT NULL,
            updated_at TIMESTAMP NOT NULL,
            deleted_at TIMESTAMP NULL
        );
        CREATE INDEX idx_decks_visible_published ON published_decks (is_deleted, is_unlisted, published_at);
        CREATE INDEX idx_decks_user ON published_decks (user_id);
        CREATE INDEX idx_decks_song ON published_decks (song_id);
    """

    __tablename__ = "published_decks"

    id = Column(String(21), primary_key=True)
    user_id = Column(String(128), nullable=False)
    user_name = Column(String(100), nullable=False, default="")
    deck = Column(JSON, nullable=False)
    song_id = Column(String(64), nullable=True)
    comment = Column(Text, nullable=True)
    hashtags = Column(JSON, nullable=False, default=list)
    image_urls = Column(JSON, nullable=False, default=list)
    thumbnail = Column(String(512), nullable=True)
    is_unlisted = Column(Boolean, nullable=False, default=False)
    is_deleted = Column(Boolean, nullable=False, default=False)
    # 计数器只能通过 EngagementRepository 的事务修改
    view_count = Column(Integer, nullable=False, default=0)
    like_count = Column(Integer, nullable=False, default=0)
    published_at = Column(PreciseTimestamp, nullable=False, default=now_utc)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=now_utc)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=now_utc, onupdate=now_utc)
    deleted_at = Column(TIMESTAMP(timezone=True), nullable=True)

    # 单向引用：话题标签索引行（用于按标签筛选）
    hashtag_rows = relationship("DeckHashtag", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_decks_visible_published", "is_deleted", "is_unlisted", "published_at"),
        Index("idx_decks_user", "user_id"),
        Index("idx_decks_song", "song_id"),
    )


class DeckHashtag(Base):
    """ 卡组话题标签索引表，一个标签一行，替代文档库的 array-contains 查询。

        CREATE TABLE IF NOT EXISTS deck_hashtags (
            deck_id VARCHAR(21) NOT NULL,
            hashtag VARCHAR(100) NOT NULL,
            PRIMARY KEY (deck_id, hashtag),
            FOREIGN KEY (deck_id) REFERENCES published_decks(id)
        );
    """

    __tablename__ = "deck_hashtags"

    deck_id = Column(String(21), ForeignKey("published_decks.id"), primary_key=True)
    hashtag = Column(String(100), primary_key=True)

    __table_args__ = (
        Index("idx_deck_hashtags_hashtag", "hashtag"),
    )
