"""
Form validation utilities (login, registration, password change)
"""
import re


EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MIN_NAME_LENGTH = 2
MIN_PHONE_LENGTH = 8
MIN_PASSWORD_LENGTH = 6
MIN_LOGIN_PASSWORD_LENGTH = 4


def is_valid_email(email: str) -> bool:
    """
    Example:
        >>> is_valid_email("ana@example.com")
        True
        >>> is_valid_email("ana@example")
        False
    """
    return bool(email) and EMAIL_PATTERN.match(email) is not None


def validate_name(value: str, field_label: str = "El nombre") -> str | None:
    """
    Returns:
        Error message, or None if valid
    """
    if not value or not value.strip():
        return f"{field_label} es requerido"
    if len(value.strip()) < MIN_NAME_LENGTH:
        return f"{field_label} debe tener al menos {MIN_NAME_LENGTH} caracteres"
    return None


def validate_phone(value: str | None) -> str | None:
    """Phone is optional; when present it needs a minimum length"""
    if not value:
        return None
    if len(value.strip()) < MIN_PHONE_LENGTH:
        return f"El teléfono debe tener al menos {MIN_PHONE_LENGTH} caracteres"
    return None


def validate_email(value: str) -> str | None:
    if not value:
        return "El email es requerido"
    if not is_valid_email(value):
        return "Email inválido"
    return None


def validate_password(value: str, min_length: int = MIN_PASSWORD_LENGTH) -> str | None:
    if not value:
        return "La contraseña es requerida"
    if len(value) < min_length:
        return f"La contraseña debe tener al menos {min_length} caracteres"
    return None


def validate_login(email: str, password: str) -> dict[str, str]:
    """
    Validate login form

    Returns:
        {field: message} for invalid fields only (empty dict when valid)
    """
    errors = {
        "email": validate_email(email),
        "password": validate_password(password, MIN_LOGIN_PASSWORD_LENGTH),
    }
    return {field: msg for field, msg in errors.items() if msg}


def validate_registration(
    nombre: str,
    apellido: str,
    email: str,
    password: str,
    confirm_password: str,
    telefono: str | None = None,
) -> dict[str, str]:
    """
    Validate registration form

    Returns:
        {field: message} for invalid fields only (empty dict when valid)

    Example:
        >>> validate_registration("Ana", "Li", "ana@example.com", "secreto", "secreto")
        {}
    """
    errors = {
        "nombre": validate_name(nombre, "El nombre"),
        "apellido": validate_name(apellido, "El apellido"),
        "telefono": validate_phone(telefono),
        "email": validate_email(email),
        "password": validate_password(password),
    }
    if not confirm_password:
        errors["confirm_password"] = "Confirma tu contraseña"
    elif password != confirm_password:
        errors["confirm_password"] = "Las contraseñas no coinciden"

    return {field: msg for field, msg in errors.items() if msg}


class FormValidationError(ValueError):
    """Local form validation failed; errors maps field -> message"""

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        super().__init__("; ".join(errors.values()))
