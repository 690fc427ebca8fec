# deckhub/storage/deck/deck_interface.py

from datetime import datetime
from typing import Optional, List, Protocol

from deckhub.schemas.deck import (
    DeckCreate,
    DeckOut,
    DeckAdminOut,
    GetDecksParams,
    GetMyDecksParams,
)
from deckhub.schemas.page import PageInfo, PageParams


class IDeckRepository(Protocol):
    """
    卡组仓库接口协议（数据层抽象接口）
    业务层依赖本接口，而不是具体实现，方便后续替换为不同数据源
    计数器（like_count / view_count）不在这里修改，见 IEngagementRepository
    """

    def exists(self, deck_id: str) -> bool:
        """id 是否已被占用（包含软删除的卡组）"""
        ...

    def create_deck(self, data: DeckCreate) -> DeckOut:
        """
        写入新卡组（计数器为 0）
        - id 冲突时抛 DeckAlreadyExists
        """
        ...

    def get_deck(self, deck_id: str) -> Optional[DeckOut]:
        """未软删除的卡组（不公开的卡组也能按 id 取到）"""
        ...

    def admin_get_deck(self, deck_id: str) -> Optional[DeckAdminOut]:
        """不过滤软删除"""
        ...

    def list_public_decks(self, params: GetDecksParams) -> tuple[List[DeckOut], PageInfo]:
        """公共列表：排除不公开和软删除，可按作者 / 曲目 / 标签筛选"""
        ...

    def list_user_decks(self, user_id: str, params: GetMyDecksParams) -> tuple[List[DeckOut], PageInfo]:
        """作者本人的卡组：包含不公开，排除软删除"""
        ...

    def list_liked_decks(self, user_id: str, params: PageParams) -> tuple[List[DeckOut], PageInfo]:
        """用户点赞过的卡组，按点赞时间倒序"""
        ...

    def list_public_hashtags_since(self, since: datetime) -> List[object]:
        """返回 since 之后发布的公共卡组的 hashtags 原始字段（可能是脏数据）"""
        ...

    def soft_delete_deck(self, deck_id: str) -> bool:
        """
        软删除：
        - 本次从 Active -> Hidden 返回 True
        - 不存在或已是 Hidden 返回 False（幂等）
        """
        ...
