"""
Authentication endpoints (login, registration, logout)
"""
from typing import Any

from pydantic import BaseModel

from saldo.api.v1.schemas import LoginResult
from saldo.infrastructure.http.client import ApiClient
from saldo.infrastructure.http.errors import ApplicationError, unwrap_envelope


LOGIN_PATH = "/auth-cliente/login"
LOGOUT_PATH = "/auth-cliente/logout"
REGISTER_PATH = "/clientes"


# === Request models ===

class LoginRequest(BaseModel):
    email: str
    contrasena: str


class RegisterRequest(BaseModel):
    nombre: str
    apellido: str
    email: str
    contrasena: str
    telefono: str | None = None


# === Endpoints ===

async def login(client: ApiClient, email: str, password: str) -> LoginResult:
    """
    POST /auth-cliente/login

    Response: { success, message, data: { token, cliente } }

    Raises:
        ApplicationError: success=false or no token in the response
        AuthExpiredError: wrong credentials (401)
    """
    req = LoginRequest(email=email, contrasena=password)
    data = unwrap_envelope(await client.post(LOGIN_PATH, json=req.model_dump()))
    if not isinstance(data, dict) or not data.get("token"):
        raise ApplicationError("La respuesta de inicio de sesión no contiene token", payload=data)
    return LoginResult.model_validate(data)


async def register(client: ApiClient, req: RegisterRequest) -> Any:
    """
    POST /clientes - the only call sent without a bearer token

    Returns:
        Envelope data (created client, may include a token)
    """
    body = req.model_dump(exclude_none=True)
    return unwrap_envelope(await client.post(REGISTER_PATH, json=body, skip_auth=True))


async def logout(client: ApiClient) -> None:
    """POST /auth-cliente/logout"""
    unwrap_envelope(await client.post(LOGOUT_PATH))
