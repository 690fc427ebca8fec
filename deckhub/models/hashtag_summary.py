from sqlalchemy import Column, Integer, TIMESTAMP, JSON

from deckhub.models.base import Base


class PopularHashtagSummary(Base):
    """ 热门话题标签汇总，每个统计周期一行，每次汇总整体覆盖。

        CREATE TABLE IF NOT EXISTS popular_hashtag_summaries (
            period_days INT PRIMARY KEY,                     -- 统计周期（例如最近 30 天）
            hashtags JSON NOT NULL,                          -- [{"hashtag": "#a", "count": 3}, ...]
            aggregated_at TIMESTAMP NOT NULL
        );
    """

    __tablename__ = "popular_hashtag_summaries"

    period_days = Column(Integer, primary_key=True, autoincrement=False)
    hashtags = Column(JSON, nullable=False, default=list)
    aggregated_at = Column(TIMESTAMP(timezone=True), nullable=False)
