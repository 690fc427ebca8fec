# deckhub/storage/comment/comment_interface.py

from typing import Optional, List, Protocol

from deckhub.schemas.comment import CommentOut, CommentAdminOut
from deckhub.schemas.page import PageInfo, PageParams


class ICommentRepository(Protocol):
    """
    卡组评论仓库接口协议（数据层抽象接口）
    评论只做软删除，所有软删除操作都是幂等的
    """

    def create_comment(self, deck_id: str, user_id: str, user_name: str, text: str) -> CommentOut:
        ...

    def get_comment(self, comment_id: str) -> Optional[CommentOut]:
        """未软删除的评论"""
        ...

    def admin_get_comment(self, comment_id: str) -> Optional[CommentAdminOut]:
        """不过滤软删除，返回 is_deleted"""
        ...

    def list_comments_by_deck(self, deck_id: str, params: PageParams) -> tuple[List[CommentOut], PageInfo]:
        """未软删除的评论，按创建时间倒序"""
        ...

    def soft_delete_comment(self, comment_id: str) -> bool:
        """本次从 Active -> Hidden 返回 True，已隐藏或不存在返回 False"""
        ...

    def soft_delete_by_deck(self, deck_id: str) -> int:
        """软删除卡组下所有评论，返回本次实际隐藏的条数"""
        ...
