"""
Movement domain entity - a balance-changing record (consumo / recarga)
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

from saldo.utils.dates import parse_datetime
from saldo.utils.money import format_signed_amount, to_decimal


# Direction marker inside tipoMovimiento.nombre ("Consumo", "Consumo tienda", ...)
EXPENSE_MARKER = "consumo"


class MovementDirection(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


def classify_type_name(type_name: Optional[str]) -> MovementDirection:
    """
    Expense iff the type name contains "consumo" (case-insensitive).

    The amount sign is not used: the API does not keep it consistent with
    the displayed direction.
    """
    if type_name and EXPENSE_MARKER in type_name.lower():
        return MovementDirection.EXPENSE
    return MovementDirection.INCOME


@dataclass(frozen=True)
class Movement:
    """
    Movement as returned by /auth-cliente/movimientos

    Fields keep the raw API values (monto, fecha may be strings); parsed
    views are exposed as properties. raw holds the original payload.
    """
    id: Any
    monto: Any
    fecha: Any
    tipo_movimiento: Optional[str]
    descripcion: Optional[str] = None
    factura: Optional[Dict[str, Any]] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Movement":
        """
        Build from an API dict

        Example payload:
            {"id": 7, "monto": "50.00", "fecha": "2024-01-01T10:00:00Z",
             "tipoMovimiento": {"nombre": "Consumo"}, "factura": {...}}
        """
        tipo = payload.get("tipoMovimiento")
        if isinstance(tipo, dict):
            tipo_nombre = tipo.get("nombre")
        else:
            tipo_nombre = tipo
        return cls(
            id=payload.get("id"),
            monto=payload.get("monto"),
            fecha=payload.get("fecha"),
            tipo_movimiento=tipo_nombre,
            descripcion=payload.get("descripcion"),
            factura=payload.get("factura"),
            raw=dict(payload),
        )

    @property
    def direction(self) -> MovementDirection:
        return classify_type_name(self.tipo_movimiento)

    @property
    def is_expense(self) -> bool:
        return self.direction == MovementDirection.EXPENSE

    @property
    def amount(self) -> Optional[Decimal]:
        """Parsed monto, None if missing or not numeric"""
        return to_decimal(self.monto)

    @property
    def occurred_at(self) -> Optional[datetime]:
        """Parsed fecha (aware), None if missing or invalid"""
        return parse_datetime(self.fecha)

    def display_amount(self) -> str:
        """Signed amount: "-$50,00" for consumo, "+$100,00" otherwise"""
        return format_signed_amount(self.monto, self.is_expense)
