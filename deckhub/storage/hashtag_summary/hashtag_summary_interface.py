# deckhub/storage/hashtag_summary/hashtag_summary_interface.py

from datetime import datetime
from typing import List, Optional, Protocol

from deckhub.schemas.hashtag import PopularHashtag, PopularHashtagSummaryOut


class IHashtagSummaryRepository(Protocol):
    """
    热门标签汇总仓库：每个统计周期一条记录，只做整体覆盖
    """

    def get_summary(self, period_days: int) -> Optional[PopularHashtagSummaryOut]:
        ...

    def replace_summary(
        self, period_days: int, hashtags: List[PopularHashtag], aggregated_at: datetime
    ) -> PopularHashtagSummaryOut:
        ...
