from datetime import timedelta

import pytest

from cloudshare.services.errors import Unauthenticated
from cloudshare.services.identity import JWTIdentityProvider


@pytest.fixture
def provider():
    return JWTIdentityProvider("test-secret")


def test_issued_token_resolves_to_user(provider):
    token = provider.issue_token("user-42")

    assert provider.current_user(token) == "user-42"


@pytest.mark.parametrize("credentials", [None, "", "not-a-jwt"])
def test_missing_or_garbage_credentials(provider, credentials):
    with pytest.raises(Unauthenticated):
        provider.current_user(credentials)


def test_expired_token(provider):
    token = provider.issue_token("user-42", expires_delta=timedelta(minutes=-5))

    with pytest.raises(Unauthenticated):
        provider.current_user(token)


def test_token_signed_with_other_secret(provider):
    token = JWTIdentityProvider("other-secret").issue_token("user-42")

    with pytest.raises(Unauthenticated):
        provider.current_user(token)
