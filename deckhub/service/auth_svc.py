import uuid

from deckhub.storage.api_key.api_key_interface import IApiKeyRepository
from deckhub.core.security import (
    generate_secret,
    hash_secret,
    verify_secret,
    format_credential,
    parse_credential,
)
from deckhub.core.exceptions import AuthenticationError
from deckhub.core.logx import logger


def issue_api_key(api_key_repo: IApiKeyRepository, user_id: str) -> str:
    """
    为用户签发 API Key，返回明文凭证（只返回这一次，库里只存哈希）
    """
    key_id = uuid.uuid4().hex[:16]
    secret = generate_secret()
    api_key_repo.create_key(key_id=key_id, user_id=user_id, key_hash=hash_secret(secret))
    logger.info(f"Issued api key key_id={key_id} for user={user_id}")
    return format_credential(key_id, secret)


def verify(api_key_repo: IApiKeyRepository, credential: str | None) -> str:
    """
    校验凭证，返回已验证的 user_id：
    - 格式错误 / key 不存在 / 已吊销 / 密钥不匹配 统一抛 AuthenticationError
    """
    parsed = parse_credential(credential or "")
    if parsed is None:
        raise AuthenticationError("malformed credential")

    key_id, secret = parsed
    record = api_key_repo.get_active_key(key_id)
    if record is None:
        raise AuthenticationError("unknown or revoked credential")

    user_id, key_hash = record
    if not verify_secret(secret, key_hash):
        logger.warning(f"api key secret mismatch key_id={key_id}")
        raise AuthenticationError("invalid credential")
    return user_id


def revoke_api_key(api_key_repo: IApiKeyRepository, credential: str) -> bool:
    parsed = parse_credential(credential)
    if parsed is None:
        return False
    return api_key_repo.revoke_key(parsed[0])
