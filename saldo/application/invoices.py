"""
Invoice use cases
"""
from datetime import date
from typing import Any, Dict, List, Optional

from saldo.api.v1 import cliente as cliente_api
from saldo.infrastructure.http.client import ApiClient


class InvoicesService:
    """Invoices and consumed products of the authenticated client"""

    def __init__(self, client: ApiClient):
        self.client = client

    async def fetch(
        self,
        estado: Optional[str] = None,
        fecha_inicio: Optional[date | str] = None,
        fecha_fin: Optional[date | str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        return await cliente_api.get_invoices(
            self.client,
            estado=estado,
            fecha_inicio=fecha_inicio,
            fecha_fin=fecha_fin,
            page=page,
            limit=limit,
        )

    async def consumed_products(self, cliente_id: int) -> List[Dict[str, Any]]:
        return await cliente_api.get_consumed_products(self.client, cliente_id)
