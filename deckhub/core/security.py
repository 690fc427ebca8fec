import secrets

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

# 可以全局复用一个实例
key_hasher = PasswordHasher()

API_KEY_PREFIX = "dk_"


def generate_secret() -> str:
    return secrets.token_urlsafe(32)


def hash_secret(plain_secret: str) -> str:
    """
    使用 Argon2 对 API Key 的明文密钥部分进行哈希
    """
    return key_hasher.hash(plain_secret)


def verify_secret(plain_secret: str, hashed_secret: str) -> bool:
    """
    校验明文密钥是否匹配哈希
    """
    try:
        key_hasher.verify(hashed_secret, plain_secret)
        return True
    except (VerificationError, InvalidHashError):
        return False


def format_credential(key_id: str, secret: str) -> str:
    return f"{API_KEY_PREFIX}{key_id}.{secret}"


def parse_credential(credential: str) -> tuple[str, str] | None:
    """
    拆分 "dk_<key_id>.<secret>"，格式不对返回 None
    """
    if not credential or not credential.startswith(API_KEY_PREFIX):
        return None
    key_id, sep, secret = credential[len(API_KEY_PREFIX):].partition(".")
    if not sep or not key_id or not secret:
        return None
    return key_id, secret
