"""
Tests for movement filter/sort and MovementsService
"""
import asyncio
from datetime import date

import pytest

from conftest import envelope
from saldo.application.movements import (
    MovementFilter,
    MovementSort,
    MovementsService,
    filter_and_sort,
    sort_movements,
)
from saldo.domain.movement import Movement


def make(id_, fecha, tipo, monto):
    return Movement.from_api({"id": id_, "fecha": fecha, "tipoMovimiento": {"nombre": tipo}, "monto": monto})


@pytest.fixture
def movements():
    return [
        make(1, "2024-01-01", "Consumo", 50),
        make(2, "2024-01-02", "Recarga", 100),
        make(3, "2024-01-01", "Consumo", 30),
    ]


def ids(items):
    return [m.id for m in items]


class TestFilter:
    def test_expense_only_keeps_input_order(self, movements):
        """negativos -> только два Consumo в исходном порядке"""
        result = filter_and_sort(movements, MovementFilter.EXPENSE, MovementSort.DATE_ASC)

        assert ids(result) == [1, 3]

    def test_income_only(self, movements):
        result = filter_and_sort(movements, MovementFilter.INCOME)

        assert ids(result) == [2]

    def test_all_passes_everything(self, movements):
        assert len(filter_and_sort(movements, MovementFilter.ALL)) == 3

    def test_accepts_raw_values(self, movements):
        result = filter_and_sort(movements, "negativos", "monto-asc")

        assert ids(result) == [3, 1]


class TestSort:
    def test_date_desc_is_stable(self, movements):
        """fecha-desc: 2024-01-02 первым, затем две записи 2024-01-01 в исходном порядке"""
        result = filter_and_sort(movements, sort=MovementSort.DATE_DESC)

        assert ids(result) == [2, 1, 3]

    def test_date_asc_is_stable(self, movements):
        result = filter_and_sort(movements, sort=MovementSort.DATE_ASC)

        assert ids(result) == [1, 3, 2]

    def test_amount_asc(self, movements):
        result = filter_and_sort(movements, sort=MovementSort.AMOUNT_ASC)

        assert [m.amount for m in result] == [30, 50, 100]

    def test_amount_desc(self, movements):
        result = filter_and_sort(movements, sort=MovementSort.AMOUNT_DESC)

        assert ids(result) == [2, 1, 3]

    def test_equal_amounts_keep_input_order_both_directions(self):
        items = [
            make(1, "2024-01-01", "Recarga", "20.00"),
            make(2, "2024-01-03", "Recarga", 20),
            make(3, "2024-01-02", "Consumo", 5),
            make(4, "2024-01-04", "Consumo", "20"),
        ]

        assert ids(sort_movements(items, MovementSort.AMOUNT_ASC)) == [3, 1, 2, 4]
        assert ids(sort_movements(items, MovementSort.AMOUNT_DESC)) == [1, 2, 4, 3]

    def test_mixed_date_formats_compare(self):
        items = [
            make(1, "2024-01-01T23:30:00Z", "Recarga", 1),
            make(2, "2024-01-01", "Recarga", 1),
            make(3, "2024-01-02T00:00:00-03:00", "Recarga", 1),
        ]

        assert ids(sort_movements(items, MovementSort.DATE_ASC)) == [2, 1, 3]

    def test_missing_values_go_last(self):
        """Записи без даты/суммы идут в конце, в исходном порядке"""
        items = [
            make(1, None, "Recarga", 10),
            make(2, "2024-01-02", "Recarga", None),
            make(3, "invalid", "Recarga", "abc"),
            make(4, "2024-01-01", "Recarga", 5),
        ]

        assert ids(sort_movements(items, MovementSort.DATE_DESC)) == [2, 4, 1, 3]
        assert ids(sort_movements(items, MovementSort.AMOUNT_DESC)) == [1, 4, 2, 3]

    def test_input_not_mutated(self, movements):
        original = list(movements)

        result = filter_and_sort(movements, MovementFilter.ALL, MovementSort.AMOUNT_ASC)

        assert movements == original
        assert result is not movements

    def test_empty_list(self):
        assert filter_and_sort([], MovementFilter.EXPENSE, MovementSort.DATE_DESC) == []


# ============================================================================
# MovementsService
# ============================================================================


def test_fetch_plain_list(api, server, storage):
    storage.save("abc")
    server.add("GET", "/auth-cliente/movimientos", (200, envelope([
        {"id": 1, "monto": "50", "fecha": "2024-01-01", "tipoMovimiento": {"nombre": "Consumo"}},
        {"id": 2, "monto": "100", "fecha": "2024-01-02", "tipoMovimiento": {"nombre": "Recarga"}},
    ])))

    result = asyncio.run(MovementsService(api).fetch())

    assert ids(result) == [1, 2]
    assert result[0].is_expense is True


def test_fetch_paginated_shape_and_params(api, server, storage):
    """data: {movimientos: [...]} и параметры запроса"""
    storage.save("abc")
    server.add("GET", "/auth-cliente/movimientos", (200, envelope({
        "movimientos": [{"id": 9, "monto": 5, "fecha": "2024-02-01", "tipoMovimiento": "Recarga"}],
        "total": 1,
        "page": 1,
        "limit": 20,
    })))

    result = asyncio.run(MovementsService(api).fetch(
        limit=20, offset=40, fecha_inicio=date(2024, 2, 1), tipo="Recarga",
    ))

    assert ids(result) == [9]
    request = server.calls("GET", "/auth-cliente/movimientos")[0]
    assert server.query_of(request) == {
        "limit": "20",
        "offset": "40",
        "fecha_inicio": "2024-02-01",
        "tipo": "Recarga",
    }


def test_fetch_unexpected_data_is_empty(api, server):
    server.add("GET", "/auth-cliente/movimientos", (200, envelope(None)))

    assert asyncio.run(MovementsService(api).fetch()) == []


def test_fetch_view_applies_filter_and_sort(api, server):
    server.add("GET", "/auth-cliente/movimientos", (200, envelope([
        {"id": 1, "monto": 50, "fecha": "2024-01-01", "tipoMovimiento": {"nombre": "Consumo"}},
        {"id": 2, "monto": 100, "fecha": "2024-01-02", "tipoMovimiento": {"nombre": "Recarga"}},
        {"id": 3, "monto": 30, "fecha": "2024-01-01", "tipoMovimiento": {"nombre": "Consumo"}},
    ])))

    result = asyncio.run(MovementsService(api).fetch_view(MovementFilter.EXPENSE, MovementSort.AMOUNT_ASC))

    assert ids(result) == [3, 1]
