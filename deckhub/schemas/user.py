from typing import Optional
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class UserProfileUpsert(BaseModel):
    """
    创建 / 更新自己的资料（uid 取自登录凭证，不在请求体里）
    """
    display_name: str = Field(min_length=1, max_length=100)
    bio: Optional[str] = Field(default=None, max_length=500)
    avatar_url: Optional[str] = Field(default=None, max_length=512)

    model_config = ConfigDict(extra="forbid")


class UserProfileOut(BaseModel):
    uid: str
    display_name: str
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
