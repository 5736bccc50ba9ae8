"""
Authenticated client endpoints (/auth-cliente/*, /facturas/*)

All of them require a bearer token, injected by ApiClient.
"""
from datetime import date
from typing import Any

from pydantic import BaseModel

from saldo.api.v1.schemas import AccountSummary, ClientProfile
from saldo.infrastructure.http.client import ApiClient
from saldo.infrastructure.http.errors import unwrap_envelope


PROFILE_PATH = "/auth-cliente/me"
SUMMARY_PATH = "/auth-cliente/resumen"
MOVEMENTS_PATH = "/auth-cliente/movimientos"
INVOICES_PATH = "/auth-cliente/facturas"
PASSWORD_PATH = "/auth-cliente/contrasena"
PHOTO_PATH = "/auth-cliente/foto"


# === Request models ===

class UpdateProfileRequest(BaseModel):
    nombre: str | None = None
    apellido: str | None = None
    telefono: str | None = None
    preferencias: dict[str, Any] | None = None


class ChangePasswordRequest(BaseModel):
    contrasenaActual: str
    contrasenaNueva: str


# === Helper function ===

def _date_param(value: date | str | None) -> str | None:
    if isinstance(value, date):
        return value.isoformat()
    return value


# === Endpoints ===

async def get_profile(client: ApiClient) -> ClientProfile:
    """GET /auth-cliente/me"""
    data = unwrap_envelope(await client.get(PROFILE_PATH))
    return ClientProfile.model_validate(data)


async def update_profile(client: ApiClient, req: UpdateProfileRequest) -> dict[str, Any]:
    """
    PUT /auth-cliente/me

    Response: { success, message, data: { id, nombre, apellido, email, telefono, fotoPerfil, preferencias } }

    Returns:
        data as sent by the server (may be partial)
    """
    data = unwrap_envelope(await client.put(PROFILE_PATH, json=req.model_dump(exclude_none=True)))
    return data if isinstance(data, dict) else {}


async def get_account_summary(client: ApiClient) -> AccountSummary:
    """GET /auth-cliente/resumen"""
    data = unwrap_envelope(await client.get(SUMMARY_PATH))
    return AccountSummary.model_validate(data or {})


async def get_movements(
    client: ApiClient,
    limit: int | None = None,
    offset: int | None = None,
    fecha_inicio: date | str | None = None,
    fecha_fin: date | str | None = None,
    tipo: str | None = None,
) -> list[dict[str, Any]]:
    """
    GET /auth-cliente/movimientos

    The backend answers either { data: [...] } or
    { data: { movimientos: [...], total, page, limit } }; both are flattened
    to the list of raw movement dicts.
    """
    params = {
        "limit": limit,
        "offset": offset,
        "fecha_inicio": _date_param(fecha_inicio),
        "fecha_fin": _date_param(fecha_fin),
        "tipo": tipo,
    }
    data = unwrap_envelope(await client.get(MOVEMENTS_PATH, params=params))
    return _extract_list(data, "movimientos")


async def get_invoices(
    client: ApiClient,
    estado: str | None = None,
    fecha_inicio: date | str | None = None,
    fecha_fin: date | str | None = None,
    page: int | None = None,
    limit: int | None = None,
) -> list[dict[str, Any]]:
    """GET /auth-cliente/facturas"""
    params = {
        "estado": estado,
        "fecha_inicio": _date_param(fecha_inicio),
        "fecha_fin": _date_param(fecha_fin),
        "page": page,
        "limit": limit,
    }
    data = unwrap_envelope(await client.get(INVOICES_PATH, params=params))
    return _extract_list(data, "facturas")


async def get_consumed_products(client: ApiClient, cliente_id: int) -> list[dict[str, Any]]:
    """GET /facturas/cliente/{id}/productos-consumidos (one entry per product)"""
    data = unwrap_envelope(await client.get(f"/facturas/cliente/{cliente_id}/productos-consumidos"))
    return _extract_list(data, "productos")


async def change_password(client: ApiClient, req: ChangePasswordRequest) -> str | None:
    """
    PUT /auth-cliente/contrasena

    Returns:
        Server message
    """
    # a repeated change would be checked against the old password
    body = await client.put(PASSWORD_PATH, json=req.model_dump(), idempotent=False)
    unwrap_envelope(body)
    return body.get("message") if isinstance(body, dict) else None


async def update_photo(
    client: ApiClient,
    content: bytes,
    filename: str = "profile.jpg",
    content_type: str = "image/jpeg",
) -> dict[str, Any]:
    """
    PUT /auth-cliente/foto (multipart, field "foto")

    Returns:
        data: { fotoPerfil, fotoPerfilUrl }
    """
    files = {"foto": (filename, content, content_type)}
    data = unwrap_envelope(await client.request("PUT", PHOTO_PATH, files=files))
    return data or {}


async def delete_photo(client: ApiClient) -> None:
    """DELETE /auth-cliente/foto"""
    unwrap_envelope(await client.delete(PHOTO_PATH))


def _extract_list(data: Any, key: str) -> list[dict[str, Any]]:
    if isinstance(data, dict):
        data = data.get(key, [])
    return data if isinstance(data, list) else []
