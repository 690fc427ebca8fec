from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder

from deckhub.schemas.user import UserProfileUpsert, UserProfileOut

from deckhub.core.biz_response import BizResponse
from deckhub.core.logx import logger
from deckhub.core.exceptions import AppError

from deckhub.service import user_svc

from deckhub.storage.database import get_user_repo, get_current_user_id
from deckhub.storage.user.user_interface import IUserRepository

users_router = APIRouter(prefix="/users", tags=["users"])


@users_router.put("/me", response_model=UserProfileOut)
def save_my_profile(
    data: UserProfileUpsert,
    user_id: str = Depends(get_current_user_id),
    user_repo: IUserRepository = Depends(get_user_repo),
):
    """
    创建或更新自己的资料（发布卡组、发表评论之前需要先有资料）
    """
    try:
        user = user_svc.save_my_profile(user_repo=user_repo, uid=user_id, data=data, to_dict=True)
        return BizResponse(data=jsonable_encoder(user))
    except AppError as e:
        return BizResponse(data=None, msg=e.message, code=e.code, status_code=e.status_code)
    except Exception as e:
        logger.exception("save_my_profile error")
        return BizResponse(data=None, msg=str(e), code="INTERNAL_SERVER_ERROR", status_code=500)


@users_router.get("/{uid}", response_model=UserProfileOut)
def get_profile(
    uid: str,
    user_repo: IUserRepository = Depends(get_user_repo),
):
    try:
        user = user_svc.get_profile(user_repo=user_repo, uid=uid, to_dict=True)
        return BizResponse(data=jsonable_encoder(user))
    except AppError as e:
        return BizResponse(data=None, msg=e.message, code=e.code, status_code=e.status_code)
    except Exception as e:
        logger.exception("get_profile error")
        return BizResponse(data=None, msg=str(e), code="INTERNAL_SERVER_ERROR", status_code=500)
