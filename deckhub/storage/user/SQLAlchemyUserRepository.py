# deckhub/storage/user/SQLAlchemyUserRepository.py

from typing import Optional

from sqlalchemy.orm import Session

from deckhub.models.user import UserProfile
from deckhub.schemas.user import UserProfileUpsert, UserProfileOut
from deckhub.storage.user.user_interface import IUserRepository
from deckhub.core.db import transaction
from deckhub.core.time import now_utc


class SQLAlchemyUserRepository(IUserRepository):

    def __init__(self, db: Session):
        self.db = db

    def get_user_by_uid(self, uid: str) -> Optional[UserProfileOut]:
        user = self.db.get(UserProfile, uid)
        return UserProfileOut.model_validate(user) if user else None

    def upsert_user(self, uid: str, data: UserProfileUpsert) -> UserProfileOut:
        now = now_utc()
        with transaction(self.db):
            user = self.db.get(UserProfile, uid)
            if user is None:
                user = UserProfile(uid=uid, created_at=now)
                self.db.add(user)
            user.display_name = data.display_name
            user.bio = data.bio
            user.avatar_url = data.avatar_url
            user.updated_at = now

        self.db.refresh(user)
        return UserProfileOut.model_validate(user)
