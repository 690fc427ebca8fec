# deckhub/storage/user/user_interface.py

from typing import Optional, Protocol

from deckhub.schemas.user import UserProfileUpsert, UserProfileOut


class IUserRepository(Protocol):
    """
    用户资料仓库接口协议
    """

    def get_user_by_uid(self, uid: str) -> Optional[UserProfileOut]:
        ...

    def upsert_user(self, uid: str, data: UserProfileUpsert) -> UserProfileOut:
        """不存在则创建，存在则整体覆盖资料字段"""
        ...
