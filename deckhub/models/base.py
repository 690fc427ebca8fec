from sqlalchemy import TIMESTAMP
from sqlalchemy.dialects import mysql
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# MySQL 的 TIMESTAMP 默认只精确到秒；参与排序的时间列统一用微秒精度
PreciseTimestamp = TIMESTAMP(timezone=True).with_variant(mysql.TIMESTAMP(fsp=6), "mysql")
