from deckhub.core.config import get_settings

DEFAULT_HIDE_THRESHOLD = 5


def hide_threshold() -> int:
    return get_settings().moderation_hide_threshold


def should_hide(distinct_reporter_count: int, threshold: int | None = None) -> bool:
    """
    不同通报人数达到阈值（默认 5）即隐藏。
    必须在本次通报写入之后调用，且计数已按通报人去重。
    """
    if threshold is None:
        threshold = hide_threshold()
    return distinct_reporter_count >= threshold
