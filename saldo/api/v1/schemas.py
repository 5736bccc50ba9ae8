"""
Wire models for the cliente API (pydantic)

Attribute names are English; aliases are the API's field names, which are
also the format persisted in the profile snapshot.
"""
from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")


# === Profile ===

class SubscriptionLevel(_ApiModel):
    id: int | None = None
    name: str | None = Field(default=None, alias="nombre")


class Card(_ApiModel):
    id: int | None = None
    uuid: str | None = None
    state: str | None = Field(default=None, alias="estado")
    balance: Decimal | None = Field(default=None, alias="saldoActual")
    created_at: datetime | None = Field(default=None, alias="fechaCreacion")


class ClientProfile(_ApiModel):
    """Authenticated client (/auth-cliente/me)"""
    id: int | str
    name: str | None = Field(default=None, alias="nombre")
    surname: str | None = Field(default=None, alias="apellido")
    email: str | None = None
    phone: str | None = Field(default=None, alias="telefono")
    photo: str | None = Field(default=None, alias="fotoPerfil")
    balance: Decimal | None = Field(default=None, alias="saldoActual")
    subscription_level: SubscriptionLevel | None = Field(default=None, alias="nivelSuscripcion")
    card: Card | None = Field(default=None, alias="tarjeta")

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.name, self.surname) if part)


# === Account ===

class AccountSummary(_ApiModel):
    """/auth-cliente/resumen"""
    balance: Decimal = Field(default=Decimal("0"), alias="saldoActual")
    total_consumption: Decimal | None = Field(default=None, alias="totalConsumos")
    total_payments: Decimal | None = Field(default=None, alias="totalPagos")
    last_movement: Any = Field(default=None, alias="ultimoMovimiento")


# === Auth ===

class LoginResult(_ApiModel):
    """data of /auth-cliente/login"""
    token: str
    client: dict[str, Any] | None = Field(default=None, alias="cliente")
