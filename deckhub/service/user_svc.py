from typing import Dict

from deckhub.schemas.user import UserProfileUpsert, UserProfileOut
from deckhub.storage.user.user_interface import IUserRepository

from deckhub.core.logx import logger
from deckhub.core.exceptions import UserNotFound


def require_user(user_repo: IUserRepository, uid: str) -> UserProfileOut:
    """取用户资料，不存在抛 UserNotFound"""
    user = user_repo.get_user_by_uid(uid)
    if not user:
        raise UserNotFound(user_id=uid)
    return user


def save_my_profile(
    user_repo: IUserRepository,
    uid: str,
    data: UserProfileUpsert,
    to_dict: bool = True,
) -> Dict | UserProfileOut:
    """
    创建或更新自己的资料。
    已发布的卡组 / 评论保留当时的显示名，不会被回写
    """
    user = user_repo.upsert_user(uid, data)
    logger.info(f"Saved profile uid={uid}, display_name={user.display_name}")
    return user.model_dump() if to_dict else user


def get_profile(user_repo: IUserRepository, uid: str, to_dict: bool = True) -> Dict | UserProfileOut:
    user = require_user(user_repo, uid)
    return user.model_dump() if to_dict else user
