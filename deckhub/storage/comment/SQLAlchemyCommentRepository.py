# deckhub/storage/comment/SQLAlchemyCommentRepository.py

from typing import Optional, List

from sqlalchemy.orm import Session

from deckhub.models.comment import DeckComment
from deckhub.schemas.comment import CommentOut, CommentAdminOut
from deckhub.schemas.page import PageInfo, PageParams
from deckhub.storage.comment.comment_interface import ICommentRepository
from deckhub.core.db import transaction
from deckhub.core.pagination import paginate
from deckhub.core.time import now_utc


class SQLAlchemyCommentRepository(ICommentRepository):
    """
    使用 SQLAlchemy 实现的评论仓库
    业务层依赖 ICommentRepository 接口，而不是这个具体实现
    """

    def __init__(self, db: Session):
        self.db = db

    # ---------- 内部基础查询 ----------

    def _active_query(self):
        """只查未软删除的评论"""
        return self.db.query(DeckComment).filter(DeckComment.is_deleted.is_(False))

    # ---------- 创建 ----------

    def create_comment(self, deck_id: str, user_id: str, user_name: str, text: str) -> CommentOut:
        comment = DeckComment(
            deck_id=deck_id,
            user_id=user_id,
            user_name=user_name,
            text=text,
            is_deleted=False,
            created_at=now_utc(),
        )
        with transaction(self.db):
            self.db.add(comment)

        self.db.refresh(comment)
        return CommentOut.model_validate(comment)

    # ---------- 查询 ----------

    def get_comment(self, comment_id: str) -> Optional[CommentOut]:
        comment = self._active_query().filter(DeckComment.id == comment_id).first()
        return CommentOut.model_validate(comment) if comment else None

    def admin_get_comment(self, comment_id: str) -> Optional[CommentAdminOut]:
        comment = self.db.query(DeckComment).filter(DeckComment.id == comment_id).first()
        return CommentAdminOut.model_validate(comment) if comment else None

    def list_comments_by_deck(self, deck_id: str, params: PageParams) -> tuple[List[CommentOut], PageInfo]:
        query = (
            self._active_query()
            .filter(DeckComment.deck_id == deck_id)
            .order_by(DeckComment.created_at.desc(), DeckComment.id.desc())
        )
        comments, page_info = paginate(query, params.page, params.per_page)
        return [CommentOut.model_validate(c) for c in comments], page_info

    # ---------- 软删除 ----------

    def soft_delete_comment(self, comment_id: str) -> bool:
        now = now_utc()
        with transaction(self.db):
            changed = (
                self._active_query()
                .filter(DeckComment.id == comment_id)
                .update(
                    {DeckComment.is_deleted: True, DeckComment.deleted_at: now},
                    synchronize_session=False,
                )
            )
        return bool(changed)

    def soft_delete_by_deck(self, deck_id: str) -> int:
        now = now_utc()
        with transaction(self.db):
            changed = (
                self._active_query()
                .filter(DeckComment.deck_id == deck_id)
                .update(
                    {DeckComment.is_deleted: True, DeckComment.deleted_at: now},
                    synchronize_session=False,
                )
            )
        return changed
