import logging
import sys

from deckhub.core.config import get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"


def setup_logger(name: str = "deckhub", level: str | None = None) -> logging.Logger:
    """
    创建项目统一 logger：
    - 只挂一个 stdout handler（重复 import 不会重复添加）
    - 级别默认取配置 DECKHUB_LOG_LEVEL
    """
    log = logging.getLogger(name)
    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log.addHandler(handler)
    log.setLevel((level or get_settings().log_level).upper())
    log.propagate = False
    return log


logger = setup_logger()
