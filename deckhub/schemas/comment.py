from typing import Optional, List
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from deckhub.schemas.page import PageInfo


class CommentCreate(BaseModel):
    text: str = Field(min_length=1, max_length=500)

    model_config = ConfigDict(extra="forbid")


class CommentOut(BaseModel):
    """
    对外返回的评论（列表中只会出现未删除的评论）
    """
    id: str
    deck_id: str
    user_id: str
    user_name: str
    text: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CommentAdminOut(CommentOut):
    """
    按 id 查询评论时返回，包含软删除状态
    """
    is_deleted: bool
    deleted_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class BatchCommentsOut(BaseModel):
    items: List[CommentOut]
    page_info: PageInfo
