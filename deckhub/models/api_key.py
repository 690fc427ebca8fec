from sqlalchemy import Column, String, TIMESTAMP, Index

from deckhub.models.base import Base
from deckhub.core.time import now_utc


class ApiKey(Base):
    """ API Key 表，用于默认的身份校验实现；密钥部分只保存 Argon2 哈希。

        CREATE TABLE IF NOT EXISTS api_keys (
            key_id VARCHAR(32) PRIMARY KEY,
            user_id VARCHAR(128) NOT NULL,
            key_hash VARCHAR(255) NOT NULL,
            created_at TIMESTAMP NOT NULL,
            revoked_at TIMESTAMP NULL
        );
    """

    __tablename__ = "api_keys"

    key_id = Column(String(32), primary_key=True)
    user_id = Column(String(128), nullable=False)
    key_hash = Column(String(255), nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=now_utc)
    revoked_at = Column(TIMESTAMP(timezone=True), nullable=True)

    __table_args__ = (
        Index("idx_api_keys_user", "user_id"),
    )
