from typing import Optional, List
from datetime import datetime

from pydantic import BaseModel, ConfigDict


class PopularHashtag(BaseModel):
    hashtag: str
    count: int


class PopularHashtagSummaryOut(BaseModel):
    """
    热门标签汇总；尚未汇总过时 hashtags 为空、aggregated_at 为 None
    """
    period_days: int
    hashtags: List[PopularHashtag]
    aggregated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
