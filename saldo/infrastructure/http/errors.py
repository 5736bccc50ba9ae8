"""
API error taxonomy and response classification
"""
from typing import Any, Optional

import requests


SESSION_EXPIRED_MESSAGE = "Tu sesión ha expirado. Inicia sesión nuevamente."
NETWORK_ERROR_MESSAGE = (
    "No se recibió respuesta del servidor. "
    "Verifica la URL y que el servidor esté ejecutándose."
)


class ApiError(Exception):
    """
    Base class for everything the API pipeline raises

    Attributes:
        message: user-facing message (server message when available)
        status_code: HTTP status, None when no response was received
        payload: parsed response body, if any
    """

    default_message = "Error desconocido"

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        payload: Any = None,
    ):
        self.message = message or self.default_message
        self.status_code = status_code
        self.payload = payload
        super().__init__(self.message)


class NetworkError(ApiError):
    """No response reached the client (connection refused, DNS, timeout)"""
    default_message = NETWORK_ERROR_MESSAGE


class ServerError(ApiError):
    """5xx"""
    default_message = "El servidor está experimentando problemas"


class AuthExpiredError(ApiError):
    """401 - terminal, the caller must sign in again"""
    default_message = SESSION_EXPIRED_MESSAGE


class ForbiddenError(ApiError):
    """403"""
    default_message = "No tienes permisos para realizar esta acción"


class NotFoundError(ApiError):
    """404"""
    default_message = "Recurso no encontrado"


class RequestValidationError(ApiError):
    """Any other 4xx, surfaced with the server message"""
    default_message = "Solicitud inválida"


class ApplicationError(ApiError):
    """success=false inside a 2xx envelope"""
    default_message = "La operación no pudo completarse"


def parse_body(response: requests.Response) -> Any:
    """Response JSON, or None if the body is empty / not JSON"""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def server_message(payload: Any) -> Optional[str]:
    """Extract {"message": ...} from an error body"""
    if isinstance(payload, dict):
        message = payload.get("message") or payload.get("error")
        if isinstance(message, str) and message:
            return message
    return None


def classify_response(response: requests.Response) -> ApiError:
    """
    Map a non-2xx response to an ApiError subclass

    Args:
        response: requests response with status >= 400

    Returns:
        Error instance (not raised)
    """
    status = response.status_code
    payload = parse_body(response)
    message = server_message(payload)

    if status == 401:
        error_cls = AuthExpiredError
    elif status == 403:
        error_cls = ForbiddenError
    elif status == 404:
        error_cls = NotFoundError
    elif status >= 500:
        error_cls = ServerError
    else:
        error_cls = RequestValidationError

    return error_cls(message, status_code=status, payload=payload)


def unwrap_envelope(body: Any) -> Any:
    """
    Unwrap {success, message, data}

    Bodies that are not envelopes (no "success" key) are returned unchanged.

    Raises:
        ApplicationError: if success is false
    """
    if not isinstance(body, dict) or "success" not in body:
        return body
    if not body["success"]:
        raise ApplicationError(server_message(body), payload=body)
    return body.get("data")
