# deckhub/storage/engagement/engagement_interface.py

from typing import Iterable, Protocol, Set


class IEngagementRepository(Protocol):
    """
    点赞 / 浏览仓库接口协议：
    - 成员记录（deck_likes / deck_views）与卡组计数器在同一事务内写入
    - 重复点赞 / 重复浏览 / 未点赞时取消点赞都是幂等的空操作，返回当前计数
    """

    def add_like(self, deck_id: str, user_id: str) -> int:
        """点赞，返回最新 like_count；卡组不存在或已软删除抛 DeckNotFound"""
        ...

    def remove_like(self, deck_id: str, user_id: str) -> int:
        """取消点赞，返回最新 like_count（不会小于 0）"""
        ...

    def record_view(self, deck_id: str, user_id: str) -> int:
        """记录浏览（每个用户只计一次），返回最新 view_count"""
        ...

    def has_liked(self, deck_id: str, user_id: str) -> bool:
        ...

    def liked_deck_ids(self, user_id: str, deck_ids: Iterable[str]) -> Set[str]:
        """deck_ids 中该用户点赞过的卡组"""
        ...

    def purge_engagement(self, deck_id: str) -> None:
        """删除卡组全部点赞 / 浏览记录并把两个计数器归零（所有者删除卡组时调用）"""
        ...
