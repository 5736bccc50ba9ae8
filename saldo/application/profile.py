"""
Profile use cases - fetch/update profile, password, photo
"""
import logging
from typing import Any, Dict, Optional

from saldo.api.v1 import cliente as cliente_api
from saldo.api.v1.schemas import ClientProfile
from saldo.application.auth import AuthSession
from saldo.utils.validation import FormValidationError, MIN_PASSWORD_LENGTH, validate_name, validate_phone

logger = logging.getLogger(__name__)


class ProfileValidationError(FormValidationError):
    pass


class PasswordChangeError(FormValidationError):
    pass


class ProfileService:
    """
    Use case: manage the authenticated client's profile

    Every successful read/update refreshes the cached snapshot on the
    AuthSession (and therefore in storage).
    """

    def __init__(self, session: AuthSession):
        self.session = session
        self.client = session.client

    async def fetch(self) -> ClientProfile:
        return await self.session.refresh_profile()

    async def update(
        self,
        nombre: Optional[str] = None,
        apellido: Optional[str] = None,
        telefono: Optional[str] = None,
        preferencias: Optional[Dict[str, Any]] = None,
    ) -> ClientProfile:
        """
        PUT /auth-cliente/me with the changed fields only

        Raises:
            ProfileValidationError: a provided field is invalid
        """
        errors = {}
        if nombre is not None and (msg := validate_name(nombre, "El nombre")):
            errors["nombre"] = msg
        if apellido is not None and (msg := validate_name(apellido, "El apellido")):
            errors["apellido"] = msg
        if telefono and (msg := validate_phone(telefono)):
            errors["telefono"] = msg
        if errors:
            raise ProfileValidationError(errors)

        req = cliente_api.UpdateProfileRequest(
            nombre=nombre,
            apellido=apellido,
            telefono=telefono,
            preferencias=preferencias,
        )
        updated = await cliente_api.update_profile(self.client, req)
        profile = self._merge(updated)
        await self.session.set_profile(profile)
        return profile

    async def change_password(self, current_password: str, new_password: str) -> Optional[str]:
        """
        Returns:
            Server confirmation message

        Raises:
            PasswordChangeError: new password too short or equal to the current one
        """
        errors = {}
        if not current_password:
            errors["contrasena_actual"] = "La contraseña actual es requerida"
        if not new_password or len(new_password) < MIN_PASSWORD_LENGTH:
            errors["contrasena_nueva"] = (
                f"La contraseña debe tener al menos {MIN_PASSWORD_LENGTH} caracteres"
            )
        elif new_password == current_password:
            errors["contrasena_nueva"] = "La nueva contraseña debe ser distinta de la actual"
        if errors:
            raise PasswordChangeError(errors)

        req = cliente_api.ChangePasswordRequest(
            contrasenaActual=current_password,
            contrasenaNueva=new_password,
        )
        return await cliente_api.change_password(self.client, req)

    async def update_photo(
        self,
        content: bytes,
        filename: str = "profile.jpg",
        content_type: str = "image/jpeg",
    ) -> ClientProfile:
        data = await cliente_api.update_photo(self.client, content, filename, content_type)
        profile = self._merge({
            "fotoPerfil": data.get("fotoPerfil"),
            "fotoPerfilUrl": data.get("fotoPerfilUrl"),
        })
        await self.session.set_profile(profile)
        return profile

    async def delete_photo(self) -> ClientProfile:
        await cliente_api.delete_photo(self.client)
        profile = self._merge({"fotoPerfil": None, "fotoPerfilUrl": None})
        await self.session.set_profile(profile)
        return profile

    def _merge(self, changes: Dict[str, Any]) -> ClientProfile:
        """Apply wire-format changes on top of the cached profile"""
        current = self.session.profile
        base = current.model_dump(by_alias=True) if current else {}
        base.update(changes)
        return ClientProfile.model_validate(base)
