from typing import Dict

from deckhub.schemas.comment import CommentCreate, CommentOut, CommentAdminOut, BatchCommentsOut
from deckhub.schemas.page import PageParams

from deckhub.storage.deck.deck_interface import IDeckRepository
from deckhub.storage.comment.comment_interface import ICommentRepository
from deckhub.storage.user.user_interface import IUserRepository
from deckhub.service.user_svc import require_user

from deckhub.core.logx import logger
from deckhub.core.exceptions import DeckNotFound, CommentNotFound, ForbiddenAction


#---------------------------------------- 增 -----------------------------------------

def add_comment(
    deck_repo: IDeckRepository,
    user_repo: IUserRepository,
    comment_repo: ICommentRepository,
    deck_id: str,
    user_id: str,
    data: CommentCreate,
    to_dict: bool = True,
) -> Dict | CommentOut:
    """
    发表评论：
    - 只能评论未删除的卡组（不公开的卡组也可以）
    - 评论者必须有资料，评论里保存当时的显示名
    """
    if not deck_repo.get_deck(deck_id):
        raise DeckNotFound(deck_id=deck_id)
    user = require_user(user_repo, user_id)

    comment = comment_repo.create_comment(
        deck_id=deck_id, user_id=user_id, user_name=user.display_name, text=data.text
    )
    logger.info(f"Created comment id={comment.id} on deck={deck_id} by user={user_id}")
    return comment.model_dump() if to_dict else comment


#------------------------------- 查 ------------------------------------

def list_comments(
    deck_repo: IDeckRepository,
    comment_repo: ICommentRepository,
    deck_id: str,
    params: PageParams,
    to_dict: bool = True,
) -> Dict | BatchCommentsOut:
    """
    分页获取卡组评论（不含已删除 / 已隐藏），最新的在前
    """
    if not deck_repo.get_deck(deck_id):
        raise DeckNotFound(deck_id=deck_id)

    comments, page_info = comment_repo.list_comments_by_deck(deck_id, params)
    result = BatchCommentsOut(items=comments, page_info=page_info)
    return result.model_dump() if to_dict else result


def get_comment(
    comment_repo: ICommentRepository,
    deck_id: str,
    comment_id: str,
    to_dict: bool = True,
) -> Dict | CommentAdminOut:
    """
    按 id 获取评论，已删除 / 已隐藏的评论同样返回（is_deleted=True）
    """
    comment = comment_repo.admin_get_comment(comment_id)
    if not comment or comment.deck_id != deck_id:
        raise CommentNotFound(comment_id=comment_id)
    return comment.model_dump() if to_dict else comment


#------------------------------- 删 ------------------------------------

def delete_comment(
    comment_repo: ICommentRepository,
    deck_id: str,
    comment_id: str,
    user_id: str,
) -> bool:
    """
    作者软删除自己的评论：
    - 评论不存在 / 已删除 / 不属于该卡组 -> CommentNotFound
    - 不是作者 -> ForbiddenAction
    """
    comment = comment_repo.get_comment(comment_id)
    if not comment or comment.deck_id != deck_id:
        raise CommentNotFound(comment_id=comment_id)
    if comment.user_id != user_id:
        raise ForbiddenAction(f"user {user_id} is not allowed to delete comment {comment_id}")

    comment_repo.soft_delete_comment(comment_id)
    logger.info(f"Soft deleted comment id={comment_id} on deck={deck_id} by author={user_id}")
    return True
