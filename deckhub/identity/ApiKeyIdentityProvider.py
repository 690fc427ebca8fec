# deckhub/identity/ApiKeyIdentityProvider.py

from deckhub.identity.identity_interface import IIdentityProvider
from deckhub.storage.api_key.api_key_interface import IApiKeyRepository
from deckhub.service import auth_svc


class ApiKeyIdentityProvider(IIdentityProvider):
    """
    基于 api_keys 表的身份校验，凭证格式 dk_<key_id>.<secret>
    """

    def __init__(self, api_key_repo: IApiKeyRepository):
        self.api_key_repo = api_key_repo

    def verify(self, credential: str | None) -> str:
        return auth_svc.verify(self.api_key_repo, credential)
