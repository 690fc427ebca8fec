# deckhub/storage/api_key/SQLAlchemyApiKeyRepository.py

from typing import Optional

from sqlalchemy.orm import Session

from deckhub.models.api_key import ApiKey
from deckhub.storage.api_key.api_key_interface import IApiKeyRepository
from deckhub.core.db import transaction
from deckhub.core.time import now_utc


class SQLAlchemyApiKeyRepository(IApiKeyRepository):

    def __init__(self, db: Session):
        self.db = db

    def create_key(self, key_id: str, user_id: str, key_hash: str) -> None:
        with transaction(self.db):
            self.db.add(ApiKey(key_id=key_id, user_id=user_id, key_hash=key_hash, created_at=now_utc()))

    def get_active_key(self, key_id: str) -> Optional[tuple[str, str]]:
        row = (
            self.db.query(ApiKey.user_id, ApiKey.key_hash)
            .filter(ApiKey.key_id == key_id, ApiKey.revoked_at.is_(None))
            .first()
        )
        return (row.user_id, row.key_hash) if row else None

    def revoke_key(self, key_id: str) -> bool:
        with transaction(self.db):
            changed = (
                self.db.query(ApiKey)
                .filter(ApiKey.key_id == key_id, ApiKey.revoked_at.is_(None))
                .update({ApiKey.revoked_at: now_utc()}, synchronize_session=False)
            )
        return bool(changed)
