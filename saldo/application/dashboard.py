"""
Dashboard use case - account summary, profile and recent activity in parallel
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from saldo.api.v1 import cliente as cliente_api
from saldo.api.v1.schemas import AccountSummary, ClientProfile
from saldo.domain.movement import Movement
from saldo.infrastructure.http.client import ApiClient
from saldo.infrastructure.http.errors import ApiError, AuthExpiredError

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_LIMIT = 5
PARTIAL_DATA_MESSAGE = "El servidor está experimentando problemas. Mostrando datos limitados."


@dataclass
class DashboardData:
    summary: AccountSummary
    profile: ClientProfile
    recent_activity: List[Movement] = field(default_factory=list)
    error: Optional[str] = None


async def load_dashboard(client: ApiClient, cliente_id: int | str) -> DashboardData:
    """
    Load the three dashboard blocks concurrently

    A failing block falls back to placeholder data and sets error; the other
    blocks are still shown. AuthExpiredError is not a partial failure and
    propagates.

    Args:
        client: authenticated ApiClient
        cliente_id: used for the placeholder profile

    Raises:
        AuthExpiredError: the session was invalidated meanwhile
    """
    summary, profile, movements = await asyncio.gather(
        cliente_api.get_account_summary(client),
        cliente_api.get_profile(client),
        cliente_api.get_movements(client, limit=RECENT_ACTIVITY_LIMIT),
        return_exceptions=True,
    )

    results = (summary, profile, movements)
    for result in results:
        if isinstance(result, AuthExpiredError):
            raise result
    for result in results:
        if isinstance(result, BaseException) and not isinstance(result, ApiError):
            raise result

    failed = [r for r in results if isinstance(r, ApiError)]
    for exc in failed:
        logger.warning("Dashboard block failed: %s (%s)", type(exc).__name__, exc.message)

    if isinstance(summary, ApiError):
        summary = AccountSummary()
    if isinstance(profile, ApiError):
        profile = ClientProfile(id=cliente_id, nombre="Usuario", apellido="")
    if isinstance(movements, ApiError):
        movements = []

    return DashboardData(
        summary=summary,
        profile=profile,
        recent_activity=[Movement.from_api(row) for row in movements if isinstance(row, dict)],
        error=PARTIAL_DATA_MESSAGE if failed else None,
    )
