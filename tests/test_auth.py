import pytest

from deckhub.core.exceptions import AuthenticationError
from deckhub.core.security import parse_credential
from deckhub.identity.ApiKeyIdentityProvider import ApiKeyIdentityProvider
from deckhub.service import auth_svc


def test_issue_and_verify(api_key_repo):
    credential = auth_svc.issue_api_key(api_key_repo, "alice")

    assert credential.startswith("dk_")
    assert auth_svc.verify(api_key_repo, credential) == "alice"
    assert ApiKeyIdentityProvider(api_key_repo).verify(credential) == "alice"


def test_wrong_secret_rejected(api_key_repo):
    credential = auth_svc.issue_api_key(api_key_repo, "alice")
    key_id, _ = parse_credential(credential)

    with pytest.raises(AuthenticationError):
        auth_svc.verify(api_key_repo, f"dk_{key_id}.not-the-secret")


@pytest.mark.parametrize("credential", [None, "", "garbage", "dk_", "dk_abc", "dk_.secret"])
def test_malformed_credentials(api_key_repo, credential):
    with pytest.raises(AuthenticationError):
        auth_svc.verify(api_key_repo, credential)


def test_revoked_key_rejected(api_key_repo):
    credential = auth_svc.issue_api_key(api_key_repo, "alice")
    assert auth_svc.revoke_api_key(api_key_repo, credential)

    with pytest.raises(AuthenticationError):
        auth_svc.verify(api_key_repo, credential)
    assert auth_svc.revoke_api_key(api_key_repo, credential) is False
