"""
Auth session use cases - login, registration, logout, restore on startup
"""
import asyncio
import logging
from typing import Any, Dict, Optional

from saldo.api.v1 import auth as auth_api
from saldo.api.v1 import cliente as cliente_api
from saldo.api.v1.schemas import ClientProfile
from saldo.infrastructure.http.client import ApiClient
from saldo.infrastructure.http.errors import ApiError, SESSION_EXPIRED_MESSAGE
from saldo.utils.validation import FormValidationError, validate_login, validate_registration

logger = logging.getLogger(__name__)


class LoginValidationError(FormValidationError):
    """Login form is invalid (nothing was sent)"""
    pass


class RegistrationValidationError(FormValidationError):
    """Registration form is invalid (nothing was sent)"""
    pass


class AuthSession:
    """
    Authenticated identity of the app

    State:
        profile: cached ClientProfile, None when signed out
        is_loading: True while login/register/logout is running
        error: last user-facing error message

    The session subscribes to the client's SessionGuard: a terminal 401
    anywhere in the app signs it out.
    """

    def __init__(self, client: ApiClient):
        self.client = client
        self.storage = client.storage
        self.profile: Optional[ClientProfile] = None
        self.is_loading = False
        self.error: Optional[str] = None
        client.guard.add_listener(self._on_session_expired)

    @property
    def is_authenticated(self) -> bool:
        return self.profile is not None

    async def restore(self) -> bool:
        """
        Restore a persisted session on startup (best effort)

        Returns:
            True if token and profile were found, False otherwise.
            Storage errors are logged and yield False.
        """
        try:
            token = await asyncio.to_thread(self.storage.get)
            snapshot = await asyncio.to_thread(self.storage.get_profile)
        except Exception:
            logger.warning("Could not read stored session, starting signed out", exc_info=True)
            return False

        if not token or not snapshot:
            return False

        try:
            profile = ClientProfile.model_validate(snapshot)
        except ValueError:
            logger.warning("Stored profile snapshot is invalid, starting signed out")
            return False

        self.client.set_auth_token(token)
        self.profile = profile
        logger.info("Session restored for client id=%s", profile.id)
        return True

    async def login(self, email: str, password: str) -> ClientProfile:
        """
        Sign in with email + password

        Raises:
            LoginValidationError: invalid form (no request sent)
            ApiError: request failed (message is stored in self.error)
        """
        errors = validate_login(email, password)
        if errors:
            raise LoginValidationError(errors)

        self.is_loading = True
        self.error = None
        try:
            result = await auth_api.login(self.client, email, password)
            return await self._establish(result.token, result.client)
        except ApiError as exc:
            self.error = exc.message
            raise
        finally:
            self.is_loading = False

    async def register(
        self,
        nombre: str,
        apellido: str,
        email: str,
        password: str,
        confirm_password: str,
        telefono: Optional[str] = None,
    ) -> ClientProfile:
        """
        Create the account and sign in right after

        Raises:
            RegistrationValidationError: invalid form (no request sent)
            ApiError: request failed
        """
        errors = validate_registration(nombre, apellido, email, password, confirm_password, telefono)
        if errors:
            raise RegistrationValidationError(errors)

        req = auth_api.RegisterRequest(
            nombre=nombre.strip(),
            apellido=apellido.strip(),
            email=email.strip(),
            contrasena=password,
            telefono=telefono.strip() if telefono else None,
        )

        self.is_loading = True
        self.error = None
        try:
            data = await auth_api.register(self.client, req)
        except ApiError as exc:
            self.error = exc.message
            raise
        finally:
            self.is_loading = False

        if isinstance(data, dict) and data.get("token"):
            self.is_loading = True
            try:
                return await self._establish(data["token"], data.get("cliente"))
            finally:
                self.is_loading = False
        return await self.login(req.email, password)

    async def logout(self) -> None:
        """
        Sign out. The local session is dropped even if the server call fails.
        """
        self.is_loading = True
        try:
            if self.client.session.headers.get("Authorization") or self.profile is not None:
                try:
                    await auth_api.logout(self.client)
                except ApiError as exc:
                    logger.warning("Logout request failed (%s), clearing local session anyway", exc.message)
            await asyncio.to_thread(self.storage.clear)
        finally:
            self.client.clear_auth_token()
            self.profile = None
            self.error = None
            self.is_loading = False

    def close(self) -> None:
        """Stop following session expiry of the client (session object discarded)"""
        self.client.guard.remove_listener(self._on_session_expired)

    async def refresh_profile(self) -> ClientProfile:
        """Reload /auth-cliente/me and update the cached snapshot"""
        profile = await cliente_api.get_profile(self.client)
        await self.set_profile(profile)
        return profile

    async def set_profile(self, profile: ClientProfile) -> None:
        await asyncio.to_thread(self.storage.save_profile, profile)
        self.profile = profile

    async def _establish(self, token: str, client_data: Optional[Dict[str, Any]]) -> ClientProfile:
        """
        Persist token + profile. If the profile cannot be obtained the token
        is removed again, so a stored token always means a full session.
        """
        await asyncio.to_thread(self.storage.save, token)
        self.client.set_auth_token(token)
        try:
            if client_data and "id" in client_data:
                profile = ClientProfile.model_validate(client_data)
            else:
                profile = await cliente_api.get_profile(self.client)
            await self.set_profile(profile)
        except Exception:
            await asyncio.to_thread(self.storage.clear)
            self.client.clear_auth_token()
            raise
        logger.info("Signed in as client id=%s", profile.id)
        return profile

    def _on_session_expired(self) -> None:
        self.profile = None
        self.error = SESSION_EXPIRED_MESSAGE
