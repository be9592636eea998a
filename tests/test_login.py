"""
Tests for the login command handler.
"""

import pytest

from sozluk.application.config import JWTSettings
from sozluk.application.errors import (
    BusinessError,
    EmailNotConfirmedError,
    InvalidCredentialsError,
    NotFoundError,
    UnauthorizedError,
    UserNotFoundError,
)
from sozluk.application.features.users import (
    LoginUserCommand,
    LoginUserCommandHandler,
    LoginUserViewModel,
)
from sozluk.domain.repository import UserRepository
from sozluk.utils import decode_access_token, hash_password

JWT = JWTSettings(secret="login-test-secret-key-long-enough-for-hs256")


@pytest.fixture
def password_hash():
    return hash_password("correct horse", rounds=4)


@pytest.fixture
def handler(async_session):
    return LoginUserCommandHandler(UserRepository(async_session), JWT)


class TestLoginUserCommandHandler:
    """Test login outcomes"""

    @pytest.mark.asyncio
    async def test_successful_login(self, async_session, handler, make_user, password_hash):
        """Test valid credentials return the user view with a token"""
        user = make_user(password=password_hash, first_name="Ada", last_name=None)
        await UserRepository(async_session).add(user)

        result = await handler.handle(
            LoginUserCommand(email_address=user.email_address, password="correct horse")
        )

        assert isinstance(result, LoginUserViewModel)
        assert result.id == user.id
        assert result.user_name == user.user_name
        assert result.first_name == "Ada"
        payload = decode_access_token(result.token, JWT.secret)
        assert payload.sub == str(user.id)
        assert payload.email == user.email_address
        assert payload.name == user.user_name
        assert payload.family_name is None

    @pytest.mark.asyncio
    async def test_unknown_email(self, handler):
        """Test an unknown email is reported as not found"""
        with pytest.raises(UserNotFoundError) as exc_info:
            await handler.handle(
                LoginUserCommand(email_address="nobody@sozluk.test", password="x")
            )

        assert isinstance(exc_info.value, NotFoundError)
        assert exc_info.value.status_code == 404
        assert exc_info.value.metadata["resource"] == "nobody@sozluk.test"

    @pytest.mark.asyncio
    async def test_wrong_password(self, async_session, handler, make_user, password_hash):
        """Test a wrong password is rejected"""
        user = make_user(password=password_hash)
        await UserRepository(async_session).add(user)

        with pytest.raises(InvalidCredentialsError) as exc_info:
            await handler.handle(
                LoginUserCommand(email_address=user.email_address, password="wrong")
            )

        assert isinstance(exc_info.value, UnauthorizedError)
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_unconfirmed_email(self, async_session, handler, make_user, password_hash):
        """Test an unconfirmed email address blocks login"""
        user = make_user(password=password_hash, email_confirmed=False)
        await UserRepository(async_session).add(user)

        with pytest.raises(EmailNotConfirmedError) as exc_info:
            await handler.handle(
                LoginUserCommand(email_address=user.email_address, password="correct horse")
            )

        assert isinstance(exc_info.value, BusinessError)
        assert exc_info.value.status_code == 400
        assert exc_info.value.metadata == {"email_address": user.email_address}
