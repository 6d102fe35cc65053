from __future__ import annotations

from portal_auth.application.dto.auth import LoginUserInput, LoginUserOutput
from portal_auth.application.ports.credential_port import CredentialPort
from portal_auth.application.ports.password_hasher_port import PasswordHasherPort
from portal_auth.application.ports.principal_port import PrincipalPort
from portal_auth.domain.exceptions import InvalidCredentialsError

from .auth_common import normalize_login, utcnow


class LoginUserUseCase:
    def __init__(
        self,
        *,
        principal_port: PrincipalPort,
        password_hasher: PasswordHasherPort,
        credential_port: CredentialPort,
    ):
        self._principal_port = principal_port
        self._password_hasher = password_hasher
        self._credential_port = credential_port

    def execute(self, command: LoginUserInput) -> LoginUserOutput:
        username = normalize_login(command.username)
        user = self._principal_port.get_user_by_username(username=username) if username else None
        if user is None or not user.password_hash:
            raise InvalidCredentialsError("Invalid credentials.")

        if not self._password_hasher.verify(command.password, user.password_hash):
            raise InvalidCredentialsError("Invalid credentials.")

        # staff principals carry no session
        access_token, access_expires_at = self._credential_port.sign(
            principal=user,
            session_id=None,
            now=utcnow(),
        )
        return LoginUserOutput(
            access_token=access_token,
            access_expires_at=access_expires_at,
            user_id=user.id,
            username=user.username,
            role_name=user.role_name,
        )
