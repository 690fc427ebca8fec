# deckhub/storage/engagement/SQLAlchemyEngagementRepository.py

from typing import Iterable, Set

from sqlalchemy import case, insert
from sqlalchemy.orm import Session

from deckhub.models.deck import PublishedDeck
from deckhub.models.engagement import DeckLike, DeckView
from deckhub.storage.engagement.engagement_interface import IEngagementRepository
from deckhub.core.db import run_in_transaction, transaction
from deckhub.core.exceptions import DeckNotFound
from deckhub.core.time import now_utc
from deckhub.core.logx import logger


class SQLAlchemyEngagementRepository(IEngagementRepository):
    """
    使用 SQLAlchemy 实现的点赞 / 浏览仓库

    每次调用都是一个完整事务：
        锁定读取卡组行 -> 按主键检查成员记录 -> 写成员记录 + 用 SQL 表达式更新计数器
    并发事务冲突（主键重复 / 锁等待 / 死锁）时整体回滚并重试，见 run_in_transaction
    """

    def __init__(self, db: Session):
        self.db = db

    # ---------- 内部 ----------

    def _lock_live_deck(self, deck_id: str):
        """
        SELECT ... FOR UPDATE 锁定卡组行（SQLite 下由 BEGIN IMMEDIATE 串行化）
        - 只取列，不经过 identity map，避免读到旧的计数
        """
        row = (
            self.db.query(
                PublishedDeck.id,
                PublishedDeck.like_count,
                PublishedDeck.view_count,
                PublishedDeck.is_deleted,
            )
            .filter(PublishedDeck.id == deck_id)
            .with_for_update()
            .first()
        )
        if row is None or row.is_deleted:
            raise DeckNotFound(deck_id=deck_id)
        return row

    def _read_counter(self, deck_id: str, column) -> int:
        return (
            self.db.query(column)
            .filter(PublishedDeck.id == deck_id)
            .scalar()
        )

    def _bump(self, deck_id: str, column, step: int) -> None:
        if step > 0:
            value = column + step
        else:
            # 计数器不小于 0
            value = case((column + step > 0, column + step), else_=0)
        (
            self.db.query(PublishedDeck)
            .filter(PublishedDeck.id == deck_id)
            .update({column: value}, synchronize_session=False)
        )

    # ---------- 点赞 / 取消点赞 ----------

    def add_like(self, deck_id: str, user_id: str) -> int:
        def work() -> int:
            deck = self._lock_live_deck(deck_id)
            existing = (
                self.db.query(DeckLike.deck_id)
                .filter(DeckLike.deck_id == deck_id, DeckLike.user_id == user_id)
                .first()
            )
            if existing is not None:
                logger.debug(f"duplicate like ignored deck={deck_id} user={user_id}")
                return deck.like_count

            # 先写成员记录：并发的同一用户点赞会在这里主键冲突，整体回滚重试
            self.db.execute(
                insert(DeckLike).values(deck_id=deck_id, user_id=user_id, created_at=now_utc())
            )
            self._bump(deck_id, PublishedDeck.like_count, 1)
            return self._read_counter(deck_id, PublishedDeck.like_count)

        like_count = run_in_transaction(self.db, work)
        logger.info(f"User {user_id} liked deck={deck_id}, like_count={like_count}")
        return like_count

    def remove_like(self, deck_id: str, user_id: str) -> int:
        def work() -> int:
            deck = self._lock_live_deck(deck_id)
            removed = (
                self.db.query(DeckLike)
                .filter(DeckLike.deck_id == deck_id, DeckLike.user_id == user_id)
                .delete(synchronize_session=False)
            )
            if not removed:
                logger.debug(f"unlike without like ignored deck={deck_id} user={user_id}")
                return deck.like_count

            self._bump(deck_id, PublishedDeck.like_count, -1)
            return self._read_counter(deck_id, PublishedDeck.like_count)

        like_count = run_in_transaction(self.db, work)
        logger.info(f"User {user_id} cancel like deck={deck_id}, like_count={like_count}")
        return like_count

    # ---------- 浏览 ----------

    def record_view(self, deck_id: str, user_id: str) -> int:
        def work() -> int:
            deck = self._lock_live_deck(deck_id)
            existing = (
                self.db.query(DeckView.deck_id)
                .filter(DeckView.deck_id == deck_id, DeckView.user_id == user_id)
                .first()
            )
            if existing is not None:
                return deck.view_count

            self.db.execute(
                insert(DeckView).values(deck_id=deck_id, user_id=user_id, created_at=now_utc())
            )
            self._bump(deck_id, PublishedDeck.view_count, 1)
            return self._read_counter(deck_id, PublishedDeck.view_count)

        return run_in_transaction(self.db, work)

    # ---------- 查询 ----------

    def has_liked(self, deck_id: str, user_id: str) -> bool:
        return (
            self.db.query(DeckLike.deck_id)
            .filter(DeckLike.deck_id == deck_id, DeckLike.user_id == user_id)
            .first()
        ) is not None

    def liked_deck_ids(self, user_id: str, deck_ids: Iterable[str]) -> Set[str]:
        deck_ids = list(deck_ids)
        if not deck_ids:
            return set()
        rows = (
            self.db.query(DeckLike.deck_id)
            .filter(DeckLike.user_id == user_id, DeckLike.deck_id.in_(deck_ids))
            .all()
        )
        return {row.deck_id for row in rows}

    # ---------- 删除卡组时的级联 ----------

    def purge_engagement(self, deck_id: str) -> None:
        with transaction(self.db):
            likes = (
                self.db.query(DeckLike)
                .filter(DeckLike.deck_id == deck_id)
                .delete(synchronize_session=False)
            )
            views = (
                self.db.query(DeckView)
                .filter(DeckView.deck_id == deck_id)
                .delete(synchronize_session=False)
            )
            (
                self.db.query(PublishedDeck)
                .filter(PublishedDeck.id == deck_id)
                .update(
                    {PublishedDeck.like_count: 0, PublishedDeck.view_count: 0},
                    synchronize_session=False,
                )
            )
        logger.info(f"Purged engagement for deck={deck_id}: likes={likes}, views={views}")
