from typing import Dict, List, Optional

from deckhub.schemas.deck import (
    DeckPublish,
    DeckCreate,
    DeckOut,
    BatchDecksOut,
    GetDecksParams,
    GetMyDecksParams,
    LikeCountOut,
    ViewCountOut,
)
from deckhub.schemas.page import PageParams

from deckhub.storage.deck.deck_interface import IDeckRepository
from deckhub.storage.engagement.engagement_interface import IEngagementRepository
from deckhub.storage.comment.comment_interface import ICommentRepository
from deckhub.storage.asset.asset_interface import IAssetStorage
from deckhub.storage.user.user_interface import IUserRepository
from deckhub.service.user_svc import require_user

from deckhub.core.logx import logger
from deckhub.core.exceptions import DeckNotFound, DeckAlreadyExists, ForbiddenAction


#---------------------------------------- 资源清理 -----------------------------------------

def _delete_assets_best_effort(asset_storage: IAssetStorage, urls: List[str]) -> None:
    """
    尽力删除图片 / 缩略图：失败只记日志，不影响主流程
    """
    for url in urls:
        try:
            asset_storage.delete(url)
        except Exception:
            logger.exception(f"failed to delete asset {url}")


def _decorate_liked(
    engagement_repo: IEngagementRepository, decks: List[DeckOut], current_user_id: Optional[str]
) -> List[DeckOut]:
    """给列表中每个卡组补上 liked_by_current_user"""
    if not current_user_id or not decks:
        return decks
    liked = engagement_repo.liked_deck_ids(current_user_id, [d.id for d in decks])
    return [d.model_copy(update={"liked_by_current_user": d.id in liked}) for d in decks]


#---------------------------------------- 发布 -----------------------------------------

def publish_deck(
    deck_repo: IDeckRepository,
    user_repo: IUserRepository,
    asset_storage: IAssetStorage,
    data: DeckPublish,
    user_id: str,
    to_dict: bool = True,
) -> Dict | DeckOut:
    """
    发布卡组（对调用方来说要么全部成功，要么什么都没发生）：
    1. 发布者没有资料 -> UserNotFound；id 已存在 -> DeckAlreadyExists（都在移动资源之前失败）
    2. 把暂存区的图片、缩略图移动到正式目录
    3. 写入卡组（保存发布者当时的显示名，计数器为 0，is_unlisted 默认 False）
    4. 2 / 3 任一步失败：删除已经移动的资源后再抛出原异常
    """
    user = require_user(user_repo, user_id)
    if deck_repo.exists(data.id):
        raise DeckAlreadyExists(deck_id=data.id)

    moved: List[str] = []
    try:
        image_urls: List[str] = []
        if data.image_urls:
            image_urls = asset_storage.move_staged(data.image_urls, user_id)
            moved.extend(image_urls)

        thumbnail: Optional[str] = None
        if data.thumbnail:
            thumbnail = asset_storage.move_staged([data.thumbnail], user_id)[0]
            moved.append(thumbnail)

        deck = deck_repo.create_deck(
            DeckCreate(
                id=data.id,
                user_id=user_id,
                user_name=user.display_name,
                deck=data.deck,
                comment=data.comment,
                hashtags=data.hashtags,
                image_urls=image_urls,
                thumbnail=thumbnail,
                is_unlisted=data.is_unlisted,
            )
        )
    except Exception:
        if moved:
            logger.warning(f"publish of deck {data.id} failed, rolling back {len(moved)} moved assets")
            _delete_assets_best_effort(asset_storage, moved)
        raise

    logger.info(f"Published deck id={deck.id} by user={user_id}, unlisted={deck.is_unlisted}")
    return deck.model_dump() if to_dict else deck


#------------------------------- 查询 ------------------------------------

def get_published_deck(
    deck_repo: IDeckRepository,
    engagement_repo: IEngagementRepository,
    deck_id: str,
    current_user_id: Optional[str] = None,
    to_dict: bool = True,
) -> Dict | DeckOut:
    """
    按 id 获取卡组：不公开的卡组也能直接访问，软删除的不行
    """
    deck = deck_repo.get_deck(deck_id)
    if not deck:
        raise DeckNotFound(deck_id=deck_id)

    deck = _decorate_liked(engagement_repo, [deck], current_user_id)[0]
    return deck.model_dump() if to_dict else deck


def list_published_decks(
    deck_repo: IDeckRepository,
    engagement_repo: IEngagementRepository,
    params: GetDecksParams,
    current_user_id: Optional[str] = None,
    to_dict: bool = True,
) -> Dict | BatchDecksOut:
    """
    公共卡组列表：排除不公开 / 软删除，支持作者、曲目、标签筛选和排序
    """
    decks, page_info = deck_repo.list_public_decks(params)
    result = BatchDecksOut(items=_decorate_liked(engagement_repo, decks, current_user_id), page_info=page_info)
    return result.model_dump() if to_dict else result


def list_my_decks(
    deck_repo: IDeckRepository,
    engagement_repo: IEngagementRepository,
    params: GetMyDecksParams,
    user_id: str,
    to_dict: bool = True,
) -> Dict | BatchDecksOut:
    """
    自己发布的卡组：包含不公开的卡组
    """
    decks, page_info = deck_repo.list_user_decks(user_id, params)
    result = BatchDecksOut(items=_decorate_liked(engagement_repo, decks, user_id), page_info=page_info)
    return result.model_dump() if to_dict else result


def list_liked_decks(
    deck_repo: IDeckRepository,
    params: PageParams,
    user_id: str,
    to_dict: bool = True,
) -> Dict | BatchDecksOut:
    """
    自己点赞过的卡组，按点赞时间倒序（最近点赞的在前）
    """
    decks, page_info = deck_repo.list_liked_decks(user_id, params)
    items = [d.model_copy(update={"liked_by_current_user": True}) for d in decks]
    result = BatchDecksOut(items=items, page_info=page_info)
    return result.model_dump() if to_dict else result


#------------------------------- 删除 ------------------------------------

def delete_deck(
    deck_repo: IDeckRepository,
    engagement_repo: IEngagementRepository,
    comment_repo: ICommentRepository,
    asset_storage: IAssetStorage,
    deck_id: str,
    user_id: str,
) -> bool:
    """
    所有者删除卡组：
    1. 卡组不存在 -> DeckNotFound；不是所有者 -> ForbiddenAction
    2. 软删除卡组（记录保留用于审计）
    3. 删除全部点赞 / 浏览记录（计数器归零）
    4. 软删除全部评论
    5. 尽力删除图片 / 缩略图，失败只记日志
    每一步都是幂等的。卡组已经是删除状态时（上次中途失败，或已被审核隐藏）
    仍然把 3~5 重新执行一遍，所以所有者重试一定能把级联补齐
    """
    deck = deck_repo.admin_get_deck(deck_id)
    if not deck:
        raise DeckNotFound(deck_id=deck_id)
    if deck.user_id != user_id:
        raise ForbiddenAction(f"user {user_id} is not allowed to delete deck {deck_id}")

    if deck.is_deleted:
        logger.info(f"Deck id={deck_id} already deleted, re-running cleanup for owner={user_id}")
    deck_repo.soft_delete_deck(deck_id)
    engagement_repo.purge_engagement(deck_id)
    hidden_comments = comment_repo.soft_delete_by_deck(deck_id)

    assets = list(deck.image_urls)
    if deck.thumbnail:
        assets.append(deck.thumbnail)
    _delete_assets_best_effort(asset_storage, assets)

    logger.info(f"Deleted deck id={deck_id} by owner={user_id}, hidden_comments={hidden_comments}")
    return True


#------------------------------- 点赞 / 浏览 ------------------------------------

def add_like(
    engagement_repo: IEngagementRepository, deck_id: str, user_id: str, to_dict: bool = True
) -> Dict | LikeCountOut:
    """
    点赞：卡组存在性检查与计数在同一事务内完成；重复点赞返回当前计数
    """
    like_count = engagement_repo.add_like(deck_id, user_id)
    result = LikeCountOut(deck_id=deck_id, like_count=like_count)
    return result.model_dump() if to_dict else result


def remove_like(
    engagement_repo: IEngagementRepository, deck_id: str, user_id: str, to_dict: bool = True
) -> Dict | LikeCountOut:
    like_count = engagement_repo.remove_like(deck_id, user_id)
    result = LikeCountOut(deck_id=deck_id, like_count=like_count)
    return result.model_dump() if to_dict else result


def record_view(
    engagement_repo: IEngagementRepository, deck_id: str, user_id: str, to_dict: bool = True
) -> Dict | ViewCountOut:
    view_count = engagement_repo.record_view(deck_id, user_id)
    result = ViewCountOut(deck_id=deck_id, view_count=view_count)
    return result.model_dump() if to_dict else result
