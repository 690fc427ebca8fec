# deckhub/identity/identity_interface.py

from typing import Protocol


class IIdentityProvider(Protocol):
    """
    身份校验：把调用方提交的凭证换成已验证的 user_id
    - 校验失败抛 AuthenticationError
    """

    def verify(self, credential: str | None) -> str:
        ...
