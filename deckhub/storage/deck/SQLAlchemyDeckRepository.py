# deckhub/storage/deck/SQLAlchemyDeckRepository.py

from datetime import datetime
from typing import Optional, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from deckhub.models.deck import PublishedDeck, DeckHashtag
from deckhub.models.engagement import DeckLike
from deckhub.schemas.deck import (
    DeckCreate,
    DeckOut,
    DeckAdminOut,
    DeckOrderBy,
    SortOrder,
    GetDecksParams,
    GetMyDecksParams,
)
from deckhub.schemas.page import PageInfo, PageParams
from deckhub.storage.deck.deck_interface import IDeckRepository
from deckhub.core.db import transaction
from deckhub.core.exceptions import DeckAlreadyExists
from deckhub.core.pagination import paginate, normalize_hashtag
from deckhub.core.time import now_utc
from deckhub.core.logx import logger

ORDER_COLUMNS = {
    DeckOrderBy.PUBLISHED_AT: PublishedDeck.published_at,
    DeckOrderBy.VIEW_COUNT: PublishedDeck.view_count,
    DeckOrderBy.LIKE_COUNT: PublishedDeck.like_count,
}


class SQLAlchemyDeckRepository(IDeckRepository):
    """
    使用 SQLAlchemy 实现的卡组仓库
    业务层依赖 IDeckRepository 抽象接口
    """

    def __init__(self, db: Session):
        self.db = db

    # ---------- 内部基础查询 ----------

    def _live_query(self):
        """未软删除的卡组（包含不公开）"""
        return self.db.query(PublishedDeck).filter(PublishedDeck.is_deleted.is_(False))

    def _public_query(self):
        """
        公共列表可见：
        - 未软删除
        - 非不公开（unlisted）
        """
        return self._live_query().filter(PublishedDeck.is_unlisted.is_(False))

    @staticmethod
    def _apply_order(query, order_by: DeckOrderBy, order: SortOrder):
        column = ORDER_COLUMNS[order_by]
        if order == SortOrder.ASC:
            return query.order_by(column.asc(), PublishedDeck.id.asc())
        return query.order_by(column.desc(), PublishedDeck.id.desc())

    # ---------- 创建 ----------

    def exists(self, deck_id: str) -> bool:
        return (
            self.db.query(PublishedDeck.id)
            .filter(PublishedDeck.id == deck_id)
            .first()
        ) is not None

    def create_deck(self, data: DeckCreate) -> DeckOut:
        now = now_utc()
        deck = PublishedDeck(
            id=data.id,
            user_id=data.user_id,
            user_name=data.user_name,
            deck=data.deck.model_dump(),
            song_id=data.deck.song_id,
            comment=data.comment,
            hashtags=list(data.hashtags),
            image_urls=list(data.image_urls),
            thumbnail=data.thumbnail,
            is_unlisted=data.is_unlisted,
            is_deleted=False,
            view_count=0,
            like_count=0,
            published_at=now,
            created_at=now,
            updated_at=now,
        )
        deck.hashtag_rows = [DeckHashtag(deck_id=data.id, hashtag=tag) for tag in data.hashtags]

        try:
            with transaction(self.db):
                self.db.add(deck)
        except IntegrityError as e:
            # 并发发布同一个 id：先检查通过，插入时主键冲突
            raise DeckAlreadyExists(deck_id=data.id) from e

        self.db.refresh(deck)
        return DeckOut.model_validate(deck)

    # ---------- 查询 ----------

    def get_deck(self, deck_id: str) -> Optional[DeckOut]:
        deck = self._live_query().filter(PublishedDeck.id == deck_id).first()
        if not deck:
            return None
        return DeckOut.model_validate(deck)

    def admin_get_deck(self, deck_id: str) -> Optional[DeckAdminOut]:
        deck = self.db.query(PublishedDeck).filter(PublishedDeck.id == deck_id).first()
        if not deck:
            return None
        return DeckAdminOut.model_validate(deck)

    def list_public_decks(self, params: GetDecksParams) -> tuple[List[DeckOut], PageInfo]:
        query = self._public_query()

        if params.user_id:
            query = query.filter(PublishedDeck.user_id == params.user_id)
        if params.song_id:
            query = query.filter(PublishedDeck.song_id == params.song_id)

        tag = normalize_hashtag(params.tag)
        if tag:
            query = query.join(DeckHashtag, DeckHashtag.deck_id == PublishedDeck.id).filter(
                DeckHashtag.hashtag == tag
            )

        query = self._apply_order(query, params.order_by, params.order)
        decks, page_info = paginate(query, params.page, params.per_page)
        return [DeckOut.model_validate(d) for d in decks], page_info

    def list_user_decks(self, user_id: str, params: GetMyDecksParams) -> tuple[List[DeckOut], PageInfo]:
        query = self._live_query().filter(PublishedDeck.user_id == user_id)
        query = self._apply_order(query, params.order_by, params.order)
        decks, page_info = paginate(query, params.page, params.per_page)
        return [DeckOut.model_validate(d) for d in decks], page_info

    def list_liked_decks(self, user_id: str, params: PageParams) -> tuple[List[DeckOut], PageInfo]:
        # 按点赞时间倒序，而不是卡组发布时间
        query = (
            self._live_query()
            .join(DeckLike, DeckLike.deck_id == PublishedDeck.id)
            .filter(DeckLike.user_id == user_id)
            .order_by(DeckLike.created_at.desc(), PublishedDeck.id.desc())
        )
        decks, page_info = paginate(query, params.page, params.per_page)
        return [DeckOut.model_validate(d) for d in decks], page_info

    def list_public_hashtags_since(self, since: datetime) -> List[object]:
        rows = (
            self._public_query()
            .with_entities(PublishedDeck.id, PublishedDeck.hashtags)
            .filter(PublishedDeck.published_at >= since)
            .all()
        )
        return [row.hashtags for row in rows]

    # ---------- 软删除 ----------

    def soft_delete_deck(self, deck_id: str) -> bool:
        now = now_utc()
        with transaction(self.db):
            # 条件更新保证幂等：只有仍处于 Active 的卡组才会被修改
            changed = (
                self.db.query(PublishedDeck)
                .filter(PublishedDeck.id == deck_id, PublishedDeck.is_deleted.is_(False))
                .update(
                    {
                        PublishedDeck.is_deleted: True,
                        PublishedDeck.deleted_at: now,
                        PublishedDeck.updated_at: now,
                    },
                    synchronize_session=False,
                )
            )

        if changed:
            logger.info(f"Soft deleted deck id={deck_id}")
        return bool(changed)
