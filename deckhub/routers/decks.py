from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.encoders import jsonable_encoder

from deckhub.schemas.deck import (
    DeckPublish,
    DeckOut,
    BatchDecksOut,
    DeckOrderBy,
    SortOrder,
    GetDecksParams,
    GetMyDecksParams,
    LikeCountOut,
    ViewCountOut,
)
from deckhub.schemas.page import PageParams
from deckhub.schemas.hashtag import PopularHashtagSummaryOut

from deckhub.core.biz_response import BizResponse
from deckhub.core.logx import logger
from deckhub.core.exceptions import AppError

from deckhub.service import deck_svc, hashtag_svc

from deckhub.storage.database import (
    get_deck_repo,
    get_engagement_repo,
    get_comment_repo,
    get_hashtag_summary_repo,
    get_asset_storage,
    get_user_repo,
    get_current_user_id,
    get_optional_user_id,
)
from deckhub.storage.deck.deck_interface import IDeckRepository
from deckhub.storage.engagement.engagement_interface import IEngagementRepository
from deckhub.storage.comment.comment_interface import ICommentRepository
from deckhub.storage.hashtag_summary.hashtag_summary_interface import IHashtagSummaryRepository
from deckhub.storage.asset.asset_interface import IAssetStorage
from deckhub.storage.user.user_interface import IUserRepository

decks_router = APIRouter(prefix="/decks", tags=["decks"])


# 固定路径（/hashtags、/me）必须放在 /{deck_id} 之前注册

# -------------------------- 热门标签 -------------------------- #

@decks_router.get("/hashtags", response_model=PopularHashtagSummaryOut)
def get_popular_hashtags(
    period_days: Optional[int] = None,
    summary_repo: IHashtagSummaryRepository = Depends(get_hashtag_summary_repo),
):
    """
    读取最近一次汇总的热门标签（汇总由定时脚本完成）
    """
    try:
        result = hashtag_svc.get_popular_hashtags(
            summary_repo=summary_repo,
            period_days=period_days,
            to_dict=True,
        )
        return BizResponse(data=jsonable_encoder(result))
    except AppError as e:
        return BizResponse(data=None, msg=e.message, code=e.code, status_code=e.status_code)
    except Exception as e:
        logger.exception("get_popular_hashtags error")
        return BizResponse(data=None, msg=str(e), code="INTERNAL_SERVER_ERROR", status_code=500)


# -------------------------- 列表 -------------------------- #

@decks_router.get("/", response_model=BatchDecksOut)
def list_decks(
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, ge=1),
    order_by: DeckOrderBy = DeckOrderBy.PUBLISHED_AT,
    order: SortOrder = SortOrder.DESC,
    user_id: Optional[str] = None,
    song_id: Optional[str] = None,
    tag: Optional[str] = None,
    current_user_id: Optional[str] = Depends(get_optional_user_id),
    deck_repo: IDeckRepository = Depends(get_deck_repo),
    engagement_repo: IEngagementRepository = Depends(get_engagement_repo),
):
    """
    公共卡组列表：
    - 不包含不公开 / 已删除的卡组
    - 可按作者、曲目、标签筛选（tag 写不写 # 都可以）
    - 按发布时间 / 浏览数 / 点赞数排序
    """
    try:
        params = GetDecksParams(
            page=page,
            per_page=per_page,
            order_by=order_by,
            order=order,
            user_id=user_id,
            song_id=song_id,
            tag=tag,
        )
        result = deck_svc.list_published_decks(
            deck_repo=deck_repo,
            engagement_repo=engagement_repo,
            params=params,
            current_user_id=current_user_id,
            to_dict=True,
        )
        return BizResponse(data=jsonable_encoder(result))
    except AppError as e:
        return BizResponse(data=None, msg=e.message, code=e.code, status_code=e.status_code)
    except Exception as e:
        logger.exception("list_decks error")
        return BizResponse(data=None, msg=str(e), code="INTERNAL_SERVER_ERROR", status_code=500)


@decks_router.get("/me", response_model=BatchDecksOut)
def list_my_decks(
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, ge=1),
    order_by: DeckOrderBy = DeckOrderBy.PUBLISHED_AT,
    order: SortOrder = SortOrder.DESC,
    user_id: str = Depends(get_current_user_id),
    deck_repo: IDeckRepository = Depends(get_deck_repo),
    engagement_repo: IEngagementRepository = Depends(get_engagement_repo),
):
    """
    自己发布的卡组（包含不公开的卡组）
    """
    try:
        params = GetMyDecksParams(page=page, per_page=per_page, order_by=order_by, order=order)
        result = deck_svc.list_my_decks(
            deck_repo=deck_repo,
            engagement_repo=engagement_repo,
            params=params,
            user_id=user_id,
            to_dict=True,
        )
        return BizResponse(data=jsonable_encoder(result))
    except AppError as e:
        return BizResponse(data=None, msg=e.message, code=e.code, status_code=e.status_code)
    except Exception as e:
        logger.exception("list_my_decks error")
        return BizResponse(data=None, msg=str(e), code="INTERNAL_SERVER_ERROR", status_code=500)


@decks_router.get("/me/likes", response_model=BatchDecksOut)
def list_liked_decks(
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, ge=1),
    user_id: str = Depends(get_current_user_id),
    deck_repo: IDeckRepository = Depends(get_deck_repo),
):
    """
    自己点赞过的卡组，最近点赞的在前
    """
    try:
        result = deck_svc.list_liked_decks(
            deck_repo=deck_repo,
            params=PageParams(page=page, per_page=per_page),
            user_id=user_id,
            to_dict=True,
        )
        return BizResponse(data=jsonable_encoder(result))
    except AppError as e:
        return BizResponse(data=None, msg=e.message, code=e.code, status_code=e.status_code)
    except Exception as e:
        logger.exception("list_liked_decks error")
        return BizResponse(data=None, msg=str(e), code="INTERNAL_SERVER_ERROR", status_code=500)


# -------------------------- 发布 -------------------------- #

@decks_router.post("/publish", response_model=DeckOut)
def publish_deck(
    data: DeckPublish,
    user_id: str = Depends(get_current_user_id),
    deck_repo: IDeckRepository = Depends(get_deck_repo),
    user_repo: IUserRepository = Depends(get_user_repo),
    asset_storage: IAssetStorage = Depends(get_asset_storage),
):
    """
    发布卡组：
    - 发布者还没有资料返回 404
    - id 已存在返回 409
    - 图片 / 缩略图从暂存区移动到正式目录，失败时全部回滚
    """
    try:
        deck = deck_svc.publish_deck(
            deck_repo=deck_repo,
            user_repo=user_repo,
            asset_storage=asset_storage,
            data=data,
            user_id=user_id,
            to_dict=True,
        )
        return BizResponse(data=jsonable_encoder(deck), status_code=201)
    except AppError as e:
        return BizResponse(data=None, msg=e.message, code=e.code, status_code=e.status_code)
    except Exception as e:
        logger.exception("publish_deck error")
        return BizResponse(data=None, msg=str(e), code="INTERNAL_SERVER_ERROR", status_code=500)


# -------------------------- 单个卡组 -------------------------- #

@decks_router.get("/{deck_id}", response_model=DeckOut)
def get_deck(
    deck_id: str,
    current_user_id: Optional[str] = Depends(get_optional_user_id),
    deck_repo: IDeckRepository = Depends(get_deck_repo),
    engagement_repo: IEngagementRepository = Depends(get_engagement_repo),
):
    """
    按 id 查看卡组：不公开的卡组可以直接访问，已删除的返回 404
    """
    try:
        deck = deck_svc.get_published_deck(
            deck_repo=deck_repo,
            engagement_repo=engagement_repo,
            deck_id=deck_id,
            current_user_id=current_user_id,
            to_dict=True,
        )
        return BizResponse(data=jsonable_encoder(deck))
    except AppError as e:
        return BizResponse(data=None, msg=e.message, code=e.code, status_code=e.status_code)
    except Exception as e:
        logger.exception("get_deck error")
        return BizResponse(data=None, msg=str(e), code="INTERNAL_SERVER_ERROR", status_code=500)


@decks_router.delete("/{deck_id}")
def delete_deck(
    deck_id: str,
    user_id: str = Depends(get_current_user_id),
    deck_repo: IDeckRepository = Depends(get_deck_repo),
    engagement_repo: IEngagementRepository = Depends(get_engagement_repo),
    comment_repo: ICommentRepository = Depends(get_comment_repo),
    asset_storage: IAssetStorage = Depends(get_asset_storage),
):
    """
    所有者删除卡组：软删除卡组、清空点赞 / 浏览、软删除评论、删除图片
    """
    try:
        ok = deck_svc.delete_deck(
            deck_repo=deck_repo,
            engagement_repo=engagement_repo,
            comment_repo=comment_repo,
            asset_storage=asset_storage,
            deck_id=deck_id,
            user_id=user_id,
        )
        return BizResponse(data={"deck_id": deck_id, "deleted": ok})
    except AppError as e:
        return BizResponse(data=None, msg=e.message, code=e.code, status_code=e.status_code)
    except Exception as e:
        logger.exception("delete_deck error")
        return BizResponse(data=None, msg=str(e), code="INTERNAL_SERVER_ERROR", status_code=500)


# -------------------------- 点赞 / 浏览 -------------------------- #

@decks_router.post("/{deck_id}/like", response_model=LikeCountOut)
def like_deck(
    deck_id: str,
    user_id: str = Depends(get_current_user_id),
    engagement_repo: IEngagementRepository = Depends(get_engagement_repo),
):
    """
    点赞，重复点赞不报错，返回当前点赞数
    """
    try:
        result = deck_svc.add_like(engagement_repo, deck_id, user_id, to_dict=True)
        return BizResponse(data=jsonable_encoder(result))
    except AppError as e:
        return BizResponse(data=None, msg=e.message, code=e.code, status_code=e.status_code)
    except Exception as e:
        logger.exception("like_deck error")
        return BizResponse(data=None, msg=str(e), code="INTERNAL_SERVER_ERROR", status_code=500)


@decks_router.delete("/{deck_id}/like", response_model=LikeCountOut)
def unlike_deck(
    deck_id: str,
    user_id: str = Depends(get_current_user_id),
    engagement_repo: IEngagementRepository = Depends(get_engagement_repo),
):
    """
    取消点赞，没点过赞也不报错
    """
    try:
        result = deck_svc.remove_like(engagement_repo, deck_id, user_id, to_dict=True)
        return BizResponse(data=jsonable_encoder(result))
    except AppError as e:
        return BizResponse(data=None, msg=e.message, code=e.code, status_code=e.status_code)
    except Exception as e:
        logger.exception("unlike_deck error")
        return BizResponse(data=None, msg=str(e), code="INTERNAL_SERVER_ERROR", status_code=500)


@decks_router.post("/{deck_id}/view", response_model=ViewCountOut)
def view_deck(
    deck_id: str,
    user_id: str = Depends(get_current_user_id),
    engagement_repo: IEngagementRepository = Depends(get_engagement_repo),
):
    """
    记录浏览，每个用户只计一次
    """
    try:
        result = deck_svc.record_view(engagement_repo, deck_id, user_id, to_dict=True)
        return BizResponse(data=jsonable_encoder(result))
    except AppError as e:
        return BizResponse(data=None, msg=e.message, code=e.code, status_code=e.status_code)
    except Exception as e:
        logger.exception("view_deck error")
        return BizResponse(data=None, msg=str(e), code="INTERNAL_SERVER_ERROR", status_code=500)
