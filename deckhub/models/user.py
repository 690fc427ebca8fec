from sqlalchemy import Column, String, TIMESTAMP, Text

from deckhub.models.base import Base
from deckhub.core.time import now_utc


class UserProfile(Base):
    """ 用户资料表，发布卡组 / 发表评论前必须先有资料；
        卡组和评论里保存的是当时的 display_name（冗余字段）。

        CREATE TABLE IF NOT EXISTS user_profiles (
            uid VARCHAR(128) PRIMARY KEY,             -- 与身份校验返回的 user_id 一致
            display_name VARCHAR(100) NOT NULL,       -- 显示名
            bio TEXT NULL,                            -- 自我介绍
            avatar_url VARCHAR(512) NULL,             -- 头像
            created_at TIMESTAMP NOT NULL,
            updated_at TIMESTAMP NOT NULL
        );
    """

    __tablename__ = "user_profiles"

    uid = Column(String(128), primary_key=True)
    display_name = Column(String(100), nullable=False)
    bio = Column(Text, nullable=True)
    avatar_url = Column(String(512), nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=now_utc)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=now_utc, onupdate=now_utc)
