import datetime

import pytest
from fastapi import HTTPException
from jose import jwt

from rbac_admin.apps.api.config import settings
from rbac_admin.apps.api.dependencies import am
from rbac_admin.server.auth import AuthManager


def expires_in(token, secret="secret"):
    claims = jwt.decode(token, secret, algorithms=["HS256"])
    expires_at = datetime.datetime.fromtimestamp(claims["exp"], datetime.timezone.utc)
    return expires_at - datetime.datetime.now(datetime.timezone.utc)


class TestAuthManager:
    def test_default_lifetime_comes_from_constructor(self):
        manager = AuthManager("secret", "HS256", access_token_expire_minutes=90)

        remaining = expires_in(manager.create_access_token({"sub": "admin"}))

        assert datetime.timedelta(minutes=89) < remaining <= datetime.timedelta(minutes=90)

    def test_explicit_lifetime_wins(self):
        manager = AuthManager("secret", "HS256", access_token_expire_minutes=90)

        token = manager.create_access_token(
            {"sub": "admin"}, expires_delta=datetime.timedelta(minutes=5)
        )

        assert expires_in(token) <= datetime.timedelta(minutes=5)

    def test_api_manager_uses_configured_lifetime(self):
        assert am.access_token_expire_minutes == settings.ACCESS_TOKEN_EXPIRE_MINUTES

    def test_decode_subject(self):
        manager = AuthManager("secret", "HS256")
        token = manager.create_access_token({"sub": "admin"})

        assert manager.decode_subject(token) == "admin"

    def test_decode_rejects_foreign_signature(self):
        token = AuthManager("other", "HS256").create_access_token({"sub": "admin"})

        with pytest.raises(HTTPException) as exc_info:
            AuthManager("secret", "HS256").decode_subject(token)

        assert exc_info.value.status_code == 401
