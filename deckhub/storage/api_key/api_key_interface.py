# deckhub/storage/api_key/api_key_interface.py

from typing import Optional, Protocol


class IApiKeyRepository(Protocol):
    """
    API Key 仓库：只保存密钥哈希，明文只在签发时返回一次
    """

    def create_key(self, key_id: str, user_id: str, key_hash: str) -> None:
        ...

    def get_active_key(self, key_id: str) -> Optional[tuple[str, str]]:
        """返回 (user_id, key_hash)，不存在或已吊销返回 None"""
        ...

    def revoke_key(self, key_id: str) -> bool:
        ...
