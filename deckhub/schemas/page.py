from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PageInfo(BaseModel):
    """
    分页信息：
    - total_count 与当前页使用同一个筛选条件计算
    """
    current_page: int
    per_page: int
    total_count: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool

    model_config = ConfigDict(from_attributes=True)


class PageParams(BaseModel):
    """通用分页参数（page 从 1 开始，per_page 超出上限时会被截断）"""
    page: int = Field(default=1, ge=1)
    per_page: Optional[int] = Field(default=None, ge=1)
