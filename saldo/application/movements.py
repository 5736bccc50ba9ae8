"""
Movements use cases - loading the history and the client-side filter/sort
"""
import logging
from datetime import date
from enum import Enum
from typing import Callable, Iterable, List, Optional

from saldo.api.v1 import cliente as cliente_api
from saldo.domain.movement import Movement
from saldo.infrastructure.http.client import ApiClient

logger = logging.getLogger(__name__)


class MovementFilter(str, Enum):
    ALL = "todos"
    INCOME = "positivos"   # recargas
    EXPENSE = "negativos"  # consumos


class MovementSort(str, Enum):
    DATE_DESC = "fecha-desc"
    DATE_ASC = "fecha-asc"
    AMOUNT_DESC = "monto-desc"
    AMOUNT_ASC = "monto-asc"


def _by_date(movement: Movement):
    return movement.occurred_at


def _by_amount(movement: Movement):
    return movement.amount


_SORT_KEYS: dict[MovementSort, Callable[[Movement], object]] = {
    MovementSort.DATE_DESC: _by_date,
    MovementSort.DATE_ASC: _by_date,
    MovementSort.AMOUNT_DESC: _by_amount,
    MovementSort.AMOUNT_ASC: _by_amount,
}

_DESCENDING = {MovementSort.DATE_DESC, MovementSort.AMOUNT_DESC}


def filter_movements(movements: Iterable[Movement], movement_filter: MovementFilter) -> List[Movement]:
    """
    Keep movements of the selected direction, input order preserved
    """
    movement_filter = MovementFilter(movement_filter)
    if movement_filter == MovementFilter.EXPENSE:
        return [m for m in movements if m.is_expense]
    if movement_filter == MovementFilter.INCOME:
        return [m for m in movements if not m.is_expense]
    return list(movements)


def sort_movements(movements: Iterable[Movement], sort: MovementSort) -> List[Movement]:
    """
    Stable sort by date or amount

    Ties keep their input order in both directions. Entries whose date or
    amount cannot be parsed go last, also in input order.
    """
    sort = MovementSort(sort)
    key = _SORT_KEYS[sort]

    comparable = []
    missing = []
    for movement in movements:
        (missing if key(movement) is None else comparable).append(movement)

    # sorted(reverse=True) keeps equal elements in original order
    ordered = sorted(comparable, key=key, reverse=sort in _DESCENDING)
    return ordered + missing


def filter_and_sort(
    movements: Iterable[Movement],
    movement_filter: MovementFilter = MovementFilter.ALL,
    sort: MovementSort = MovementSort.DATE_DESC,
) -> List[Movement]:
    """
    Apply type filter then sort. Returns a new list; the input is untouched.

    Args:
        movements: movements as loaded from the API
        movement_filter: todos / positivos / negativos
        sort: fecha-desc / fecha-asc / monto-desc / monto-asc

    Example:
        >>> filter_and_sort(movements, MovementFilter.EXPENSE, MovementSort.AMOUNT_ASC)
    """
    return sort_movements(filter_movements(movements, movement_filter), sort)


class MovementsService:
    """
    Use case: load the movement history of the authenticated client
    """

    def __init__(self, client: ApiClient):
        self.client = client

    async def fetch(
        self,
        limit: int = 100,
        offset: int = 0,
        fecha_inicio: Optional[date | str] = None,
        fecha_fin: Optional[date | str] = None,
        tipo: Optional[str] = None,
    ) -> List[Movement]:
        """
        Returns:
            Movements in server order
        """
        rows = await cliente_api.get_movements(
            self.client,
            limit=limit,
            offset=offset,
            fecha_inicio=fecha_inicio,
            fecha_fin=fecha_fin,
            tipo=tipo,
        )
        movements = [Movement.from_api(row) for row in rows if isinstance(row, dict)]
        logger.debug("Loaded %d movements (limit=%s offset=%s)", len(movements), limit, offset)
        return movements

    async def fetch_view(
        self,
        movement_filter: MovementFilter = MovementFilter.ALL,
        sort: MovementSort = MovementSort.DATE_DESC,
        limit: int = 100,
    ) -> List[Movement]:
        """Load and apply filter/sort in one call (history screen)"""
        movements = await self.fetch(limit=limit, offset=0)
        return filter_and_sort(movements, movement_filter, sort)
