from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.encoders import jsonable_encoder

from deckhub.schemas.comment import CommentCreate, CommentOut, CommentAdminOut, BatchCommentsOut
from deckhub.schemas.page import PageParams

from deckhub.core.biz_response import BizResponse
from deckhub.core.logx import logger
from deckhub.core.exceptions import AppError

from deckhub.service import comment_svc

from deckhub.storage.database import get_deck_repo, get_comment_repo, get_user_repo, get_current_user_id
from deckhub.storage.deck.deck_interface import IDeckRepository
from deckhub.storage.comment.comment_interface import ICommentRepository
from deckhub.storage.user.user_interface import IUserRepository

comments_router = APIRouter(prefix="/decks", tags=["comments"])


@comments_router.post("/{deck_id}/comments", response_model=CommentOut)
def create_comment(
    deck_id: str,
    data: CommentCreate,
    user_id: str = Depends(get_current_user_id),
    deck_repo: IDeckRepository = Depends(get_deck_repo),
    comment_repo: ICommentRepository = Depends(get_comment_repo),
    user_repo: IUserRepository = Depends(get_user_repo),
):
    """
    发表评论：
    - 校验卡组是否存在（未删除）
    - 评论者需要先创建资料
    - 评论 1~500 字
    """
    try:
        new_comment = comment_svc.add_comment(
            deck_repo=deck_repo,
            user_repo=user_repo,
            comment_repo=comment_repo,
            deck_id=deck_id,
            user_id=user_id,
            data=data,
            to_dict=True,
        )
        return BizResponse(data=jsonable_encoder(new_comment), status_code=201)
    except AppError as e:
        return BizResponse(data=None, msg=e.message, code=e.code, status_code=e.status_code)
    except Exception as e:
        logger.exception("create_comment error")
        return BizResponse(data=None, msg=str(e), code="INTERNAL_SERVER_ERROR", status_code=500)


@comments_router.get("/{deck_id}/comments", response_model=BatchCommentsOut)
def list_comments(
    deck_id: str,
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, ge=1),
    deck_repo: IDeckRepository = Depends(get_deck_repo),
    comment_repo: ICommentRepository = Depends(get_comment_repo),
):
    """
    分页获取卡组评论（不含已删除 / 已隐藏）
    """
    try:
        result = comment_svc.list_comments(
            deck_repo=deck_repo,
            comment_repo=comment_repo,
            deck_id=deck_id,
            params=PageParams(page=page, per_page=per_page),
            to_dict=True,
        )
        return BizResponse(data=jsonable_encoder(result))
    except AppError as e:
        return BizResponse(data=None, msg=e.message, code=e.code, status_code=e.status_code)
    except Exception as e:
        logger.exception("list_comments error")
        return BizResponse(data=None, msg=str(e), code="INTERNAL_SERVER_ERROR", status_code=500)


@comments_router.get("/{deck_id}/comments/{comment_id}", response_model=CommentAdminOut)
def get_comment(
    deck_id: str,
    comment_id: str,
    comment_repo: ICommentRepository = Depends(get_comment_repo),
):
    """
    按 id 查看单条评论：已删除 / 已隐藏的评论也能取到（is_deleted=True）
    """
    try:
        comment = comment_svc.get_comment(
            comment_repo=comment_repo,
            deck_id=deck_id,
            comment_id=comment_id,
            to_dict=True,
        )
        return BizResponse(data=jsonable_encoder(comment))
    except AppError as e:
        return BizResponse(data=None, msg=e.message, code=e.code, status_code=e.status_code)
    except Exception as e:
        logger.exception("get_comment error")
        return BizResponse(data=None, msg=str(e), code="INTERNAL_SERVER_ERROR", status_code=500)


@comments_router.delete("/{deck_id}/comments/{comment_id}")
def delete_comment(
    deck_id: str,
    comment_id: str,
    user_id: str = Depends(get_current_user_id),
    comment_repo: ICommentRepository = Depends(get_comment_repo),
):
    """
    作者删除自己的评论（软删除）
    """
    try:
        ok = comment_svc.delete_comment(
            comment_repo=comment_repo,
            deck_id=deck_id,
            comment_id=comment_id,
            user_id=user_id,
        )
        return BizResponse(data={"comment_id": comment_id, "deleted": ok})
    except AppError as e:
        return BizResponse(data=None, msg=e.message, code=e.code, status_code=e.status_code)
    except Exception as e:
        logger.exception("delete_comment error")
        return BizResponse(data=None, msg=str(e), code="INTERNAL_SERVER_ERROR", status_code=500)
