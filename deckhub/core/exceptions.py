# domain_exceptions.py
from typing import Any, Optional


class AppError(Exception):
    """
    业务异常基类：
    - code: 对外稳定的错误码
    - status_code: 接口层映射的 HTTP 状态码
    """
    code = "INTERNAL_SERVER_ERROR"
    status_code = 500
    default_message = "internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# ---------- NotFound ----------

class NotFoundError(AppError):
    code = "NOT_FOUND"
    status_code = 404
    default_message = "resource not found"


class DeckNotFound(NotFoundError):
    """找不到卡组（不存在或已软删除）"""
    def __init__(self, deck_id: Optional[str] = None, message: Optional[str] = None):
        if not message and deck_id is not None:
            message = f"deck {deck_id} not found"
        super().__init__(message)


class CommentNotFound(NotFoundError):
    """找不到评论（不存在、已软删除或不属于该卡组）"""
    def __init__(self, comment_id: Optional[str] = None, message: Optional[str] = None):
        if not message and comment_id is not None:
            message = f"comment {comment_id} not found"
        super().__init__(message)


class UserNotFound(NotFoundError):
    """找不到用户资料（发布卡组 / 发表评论前需要先创建资料）"""
    def __init__(self, user_id: Optional[str] = None, message: Optional[str] = None):
        if not message and user_id is not None:
            message = f"user {user_id} not found"
        super().__init__(message)


# ---------- Conflict ----------

class ConflictError(AppError):
    code = "CONFLICT"
    status_code = 409
    default_message = "resource already exists"


class DeckAlreadyExists(ConflictError):
    """发布时卡组 id 已被占用"""
    def __init__(self, deck_id: Optional[str] = None, message: Optional[str] = None):
        if not message and deck_id is not None:
            message = f"deck {deck_id} already exists"
        super().__init__(message)


# ---------- Forbidden / Auth / Validation ----------

class ForbiddenAction(AppError):
    """非所有者尝试执行所有者专属操作"""
    code = "FORBIDDEN"
    status_code = 403
    default_message = "you are not allowed to perform this action"


class AuthenticationError(AppError):
    code = "UNAUTHENTICATED"
    status_code = 401
    default_message = "authentication required"


class ValidationError(AppError):
    code = "VALIDATION_ERROR"
    status_code = 400
    default_message = "invalid input"

    def __init__(self, message: Optional[str] = None, details: Any = None):
        self.details = details
        super().__init__(message)


# ---------- Internal ----------

class InternalError(AppError):
    pass


class TransactionRetryExhausted(InternalError):
    """计数器事务冲突重试次数耗尽，本次调用没有提交任何修改"""
    def __init__(self, attempts: int, message: Optional[str] = None):
        self.attempts = attempts
        super().__init__(message or f"transaction aborted after {attempts} conflicting attempts")


class AssetStorageError(InternalError):
    default_message = "failed to move deck assets"
