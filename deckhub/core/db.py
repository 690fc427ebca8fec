import time
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, TypeVar

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from deckhub.core.config import get_settings
from deckhub.core.exceptions import TransactionRetryExhausted
from deckhub.core.logx import logger

T = TypeVar("T")

# 并发事务之间的冲突：主键重复插入（同一用户并发点赞）、锁等待超时 / 死锁
CONFLICT_ERRORS = (IntegrityError, OperationalError)


def make_engine(database_url: str, echo: bool = False) -> Engine:
    """
    创建 SQLAlchemy 引擎：
    - MySQL（pymysql）直接使用 InnoDB 行锁（SELECT ... FOR UPDATE）
    - SQLite 不支持行锁：每个事务以 BEGIN IMMEDIATE 开启，写事务在库级锁上串行
    """
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, echo=echo, pool_pre_ping=True)

    engine = create_engine(
        database_url,
        echo=echo,
        connect_args={"check_same_thread": False, "timeout": 30},
    )

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragmas(dbapi_connection, connection_record):
        # 交给 SQLAlchemy 的 begin 事件控制事务开启
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON;")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    单个事务：正常结束 commit，异常 rollback 后原样抛出
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


def run_in_transaction(
    db: Session,
    work: Callable[[], T],
    max_retries: Optional[int] = None,
    backoff_seconds: Optional[float] = None,
) -> T:
    """
    在事务中执行 work()，遇到并发冲突时整体回滚并重试：
    - work 内部必须是「读 -> 判断 -> 写」的完整过程，每次重试都从头读取
    - 业务异常（如 DeckNotFound）不重试，直接抛出
    - 重试耗尽抛 TransactionRetryExhausted，数据库中不会留下部分修改
    """
    settings = get_settings()
    attempts = max_retries if max_retries is not None else settings.tx_max_retries
    backoff = backoff_seconds if backoff_seconds is not None else settings.tx_retry_backoff_seconds

    for attempt in range(1, attempts + 1):
        try:
            with transaction(db):
                return work()
        except CONFLICT_ERRORS as e:
            logger.warning(
                f"transaction conflict attempt={attempt}/{attempts}: {e.__class__.__name__}"
            )
            if attempt == attempts:
                raise TransactionRetryExhausted(attempts) from e
            time.sleep(backoff * attempt)

    # attempts <= 0
    raise TransactionRetryExhausted(attempts)
