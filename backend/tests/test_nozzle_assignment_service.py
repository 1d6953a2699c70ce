"""
Unit tests for NozzleAssignmentService.

Ciclo di vita OPEN → CLOSED, calcolo erogato/incasso e vincolo di una
sola assegnazione aperta per erogatore.
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from app.core.config import Settings
from app.core.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from app.schemas.enums import AssignmentStatus, ShiftStatus
from app.services.nozzle_assignment_service import (
    compute_total_amount,
    dispensed_amount_of,
    total_amount_of,
)
from conftest import build_services


START = datetime(2024, 3, 1, 6, 0)
END = datetime(2024, 3, 1, 14, 0)


async def fixed_price(product_id, at):
    return Decimal("100.00")


# ============================================================
# Apertura
# ============================================================


class TestOpenAssignment:
    """Tests per l'apertura di un'assegnazione."""

    async def test_open_creates_open_assignment(self, services, repos, station, manager):
        """Test apertura: stato OPEN, lettura a 3 decimali, entry_by dell'operatore."""
        worker = station.worker("arun")
        nozzle = station.nozzle()
        shift = station.shift(worker)

        assignment_id = await services.nozzles.open_assignment(
            manager, nozzle.id, worker.id, shift.id, Decimal("1000"), start_time=START
        )

        assignment = repos.assignments.items[assignment_id]
        assert assignment.status == AssignmentStatus.OPEN
        assert assignment.opening_balance == Decimal("1000.000")
        assert assignment.start_time == START
        assert assignment.entry_by == "manager"
        assert assignment.closing_balance is None
        assert nozzle.id in repos.nozzles.locked

    async def test_negative_opening_balance_rejected(self, services, repos, station, manager):
        worker = station.worker("arun")
        nozzle = station.nozzle()
        shift = station.shift(worker)

        with pytest.raises(ValidationError):
            await services.nozzles.open_assignment(
                manager, nozzle.id, worker.id, shift.id, Decimal("-0.001")
            )
        assert repos.assignments.all() == []

    async def test_second_open_assignment_on_nozzle_conflicts(self, services, station, manager):
        """Test un erogatore non può avere due assegnazioni aperte."""
        first = station.worker("arun")
        second = station.worker("vijay")
        nozzle = station.nozzle()
        shift_a = station.shift(first)
        shift_b = station.shift(second)

        await services.nozzles.open_assignment(manager, nozzle.id, first.id, shift_a.id, Decimal("1000"))

        with pytest.raises(ConflictError):
            await services.nozzles.open_assignment(
                manager, nozzle.id, second.id, shift_b.id, Decimal("1000")
            )

    async def test_worker_must_match_shift_worker(self, services, station, manager):
        worker = station.worker("arun")
        other = station.worker("vijay")
        nozzle = station.nozzle()
        shift = station.shift(worker)

        with pytest.raises(ValidationError):
            await services.nozzles.open_assignment(manager, nozzle.id, other.id, shift.id, Decimal("1000"))

    async def test_closed_shift_rejected(self, services, station, manager):
        worker = station.worker("arun")
        nozzle = station.nozzle()
        shift = station.shift(worker, status=ShiftStatus.CLOSED)

        with pytest.raises(InvalidStateError):
            await services.nozzles.open_assignment(manager, nozzle.id, worker.id, shift.id, Decimal("1000"))

    async def test_missing_shift_or_nozzle(self, services, station, manager):
        worker = station.worker("arun")
        nozzle = station.nozzle()
        shift = station.shift(worker)

        with pytest.raises(NotFoundError):
            await services.nozzles.open_assignment(manager, nozzle.id, worker.id, uuid.uuid4(), Decimal("1"))
        with pytest.raises(NotFoundError):
            await services.nozzles.open_assignment(manager, uuid.uuid4(), worker.id, shift.id, Decimal("1"))

    async def test_salesman_cannot_backdate(self, services, station, salesman, salesman_worker):
        """Test solo manager e admin impostano orari personalizzati."""
        nozzle = station.nozzle()
        shift = station.shift(salesman_worker)

        with pytest.raises(AuthorizationError):
            await services.nozzles.open_assignment(
                salesman, nozzle.id, salesman_worker.id, shift.id, Decimal("1000"), start_time=START
            )

    async def test_salesman_cannot_open_on_other_shift(self, services, station, salesman):
        other = station.worker("vijay")
        nozzle = station.nozzle()
        shift = station.shift(other)

        with pytest.raises(AuthorizationError):
            await services.nozzles.open_assignment(salesman, nozzle.id, other.id, shift.id, Decimal("1000"))

    async def test_reading_mismatch_is_only_logged(self, services, station, manager, caplog):
        worker = station.worker("arun")
        nozzle = station.nozzle(reading="1000.000")
        shift = station.shift(worker)

        await services.nozzles.open_assignment(manager, nozzle.id, worker.id, shift.id, Decimal("1005.000"))

        assert "diversa dal contatore" in caplog.text


# ============================================================
# Chiusura
# ============================================================


class TestCloseAssignment:
    """Tests per la chiusura di un'assegnazione."""

    async def _open(self, services, station, manager, opening="1000.000"):
        worker = station.worker("arun")
        nozzle = station.nozzle(reading=opening)
        shift = station.shift(worker, start=START)
        assignment_id = await services.nozzles.open_assignment(
            manager, nozzle.id, worker.id, shift.id, Decimal(opening), start_time=START
        )
        return nozzle, assignment_id

    async def test_close_computes_dispensed_and_total(self, services, repos, station, manager):
        """Test scenario: 1000.000 → 1500.500 a 100.00 = 500.500 erogati, 50050.00 incasso."""
        nozzle, assignment_id = await self._open(services, station, manager)

        summary = await services.nozzles.close_assignment(
            manager, assignment_id, Decimal("1500.500"), fixed_price, end_time=END
        )

        assert summary.dispensed_amount == Decimal("500.500")
        assert summary.total_amount == Decimal("50050.00")
        assert summary.unit_price == Decimal("100.00")
        assert summary.status == AssignmentStatus.CLOSED
        assert summary.end_time == END

        assignment = repos.assignments.items[assignment_id]
        assert assignment.status == AssignmentStatus.CLOSED
        assert assignment.dispensed_amount == assignment.closing_balance - assignment.opening_balance
        assert assignment.total_amount == Decimal("50050.00")
        assert assignment.unit_price == Decimal("100.00")

    async def test_close_advances_nozzle_readings(self, services, station, manager):
        nozzle, assignment_id = await self._open(services, station, manager)

        await services.nozzles.close_assignment(
            manager, assignment_id, Decimal("1500.500"), fixed_price, end_time=END
        )

        assert nozzle.previous_reading == Decimal("1000.000")
        assert nozzle.current_reading == Decimal("1500.500")

    async def test_total_rounds_half_up(self, services, station, manager):
        nozzle, assignment_id = await self._open(services, station, manager)

        async def price(product_id, at):
            return Decimal("97.35")

        summary = await services.nozzles.close_assignment(
            manager, assignment_id, Decimal("1000.010"), price, end_time=END
        )

        # 0.010 x 97.35 = 0.9735 → 0.97
        assert summary.total_amount == Decimal("0.97")

    async def test_default_resolver_uses_price_history(self, services, station, manager):
        """Test senza risolutore esplicito si usa lo storico prezzi del prodotto."""
        nozzle, assignment_id = await self._open(services, station, manager)

        summary = await services.nozzles.close_assignment(
            manager, assignment_id, Decimal("1010.000"), end_time=END
        )

        assert summary.unit_price == Decimal("100.00")
        assert summary.total_amount == Decimal("1000.00")

    async def test_double_close_rejected_and_state_unchanged(self, services, repos, station, manager):
        """Test seconda chiusura: InvalidStateError, valori invariati."""
        nozzle, assignment_id = await self._open(services, station, manager)
        await services.nozzles.close_assignment(
            manager, assignment_id, Decimal("1500.500"), fixed_price, end_time=END
        )

        with pytest.raises(InvalidStateError):
            await services.nozzles.close_assignment(
                manager, assignment_id, Decimal("2000.000"), fixed_price, end_time=END
            )

        assignment = repos.assignments.items[assignment_id]
        assert assignment.closing_balance == Decimal("1500.500")
        assert assignment.total_amount == Decimal("50050.00")

    async def test_closing_below_opening_keeps_assignment_open(self, services, repos, station, manager):
        nozzle, assignment_id = await self._open(services, station, manager)

        with pytest.raises(ValidationError):
            await services.nozzles.close_assignment(
                manager, assignment_id, Decimal("999.999"), fixed_price, end_time=END
            )

        assignment = repos.assignments.items[assignment_id]
        assert assignment.status == AssignmentStatus.OPEN
        assert assignment.closing_balance is None
        assert assignment.dispensed_amount is None
        assert nozzle.current_reading == Decimal("1000.000")

    async def test_end_before_start_rejected(self, services, station, manager):
        nozzle, assignment_id = await self._open(services, station, manager)

        with pytest.raises(ValidationError):
            await services.nozzles.close_assignment(
                manager, assignment_id, Decimal("1001"), fixed_price, end_time=datetime(2024, 2, 29)
            )

    async def test_unknown_assignment(self, services, manager):
        with pytest.raises(NotFoundError):
            await services.nozzles.close_assignment(manager, uuid.uuid4(), Decimal("1"), fixed_price)

    async def test_price_resolved_once(self, services, station, manager):
        nozzle, assignment_id = await self._open(services, station, manager)
        calls = []

        async def price(product_id, at):
            calls.append((product_id, at))
            return Decimal("90.00")

        await services.nozzles.close_assignment(manager, assignment_id, Decimal("1001"), price, end_time=END)

        assert calls == [(nozzle.product_id, END)]

    async def test_nozzle_test_required_when_configured(self, repos, station, manager):
        services = build_services(repos, Settings(_env_file=None, require_nozzle_test_before_close=True))
        worker = station.worker("arun")
        nozzle = station.nozzle()
        shift = station.shift(worker, start=START)
        assignment_id = await services.nozzles.open_assignment(
            manager, nozzle.id, worker.id, shift.id, Decimal("1000"), start_time=START
        )

        with pytest.raises(InvalidStateError):
            await services.nozzles.close_assignment(manager, assignment_id, Decimal("1001"), fixed_price, end_time=END)

        await services.shifts.register_nozzle_test(
            manager, shift.id, assignment_id, Decimal("5.000"), test_datetime=START
        )
        summary = await services.nozzles.close_assignment(
            manager, assignment_id, Decimal("1001"), fixed_price, end_time=END
        )
        assert summary.status == AssignmentStatus.CLOSED


# ============================================================
# Lettura dei valori memorizzati
# ============================================================


class TestCachedAmounts:
    """Tests per la lettura di erogato/incasso con e senza cache."""

    def test_cached_values_win(self, station):
        worker = station.worker("arun")
        shift = station.shift(worker)
        assignment = station.closed_assignment(shift, station.nozzle(), "100", "110")
        assignment.total_amount = Decimal("999.99")

        assert total_amount_of(assignment) == Decimal("999.99")
        assert dispensed_amount_of(assignment) == Decimal("10.000")

    def test_legacy_assignment_recomputed_from_captured_price(self, station):
        worker = station.worker("arun")
        shift = station.shift(worker)
        assignment = station.closed_assignment(shift, station.nozzle(), "100", "110.5", cached=False)

        assert dispensed_amount_of(assignment) == Decimal("10.500")
        assert total_amount_of(assignment) == Decimal("1050.00")

    def test_legacy_assignment_without_price_counts_zero(self, station):
        worker = station.worker("arun")
        shift = station.shift(worker)
        assignment = station.closed_assignment(
            shift, station.nozzle(), "100", "110", unit_price=None, cached=False
        )

        assert total_amount_of(assignment) == Decimal("0.00")

    def test_compute_total_amount(self):
        assert compute_total_amount(Decimal("500.500"), Decimal("100.00")) == Decimal("50050.00")
        assert compute_total_amount(Decimal("0.005"), Decimal("1.00")) == Decimal("0.01")


# ============================================================
# Orari con offset e volume di test
# ============================================================


class TestCloseAssignmentBoundaries:
    """Tests per orari con fuso e test erogatore alla chiusura."""

    async def _open(self, services, station, manager, opening="1000.000"):
        worker = station.worker("arun")
        nozzle = station.nozzle(reading=opening)
        shift = station.shift(worker, start=START)
        assignment_id = await services.nozzles.open_assignment(
            manager, nozzle.id, worker.id, shift.id, Decimal(opening), start_time=START
        )
        return nozzle, shift, assignment_id

    async def test_aware_end_time_stored_as_station_time(self, services, repos, station, manager):
        """Test 14:00 UTC diventa 19:30 ora del distributore (Asia/Kolkata)."""
        _, _, assignment_id = await self._open(services, station, manager)

        summary = await services.nozzles.close_assignment(
            manager,
            assignment_id,
            Decimal("1010.000"),
            fixed_price,
            end_time=datetime(2024, 3, 1, 14, 0, tzinfo=timezone.utc),
        )

        assert summary.end_time == datetime(2024, 3, 1, 19, 30)
        assert summary.end_time.tzinfo is None
        assert repos.assignments.items[assignment_id].end_time == datetime(2024, 3, 1, 19, 30)

    async def test_aware_end_time_before_start_rejected(self, services, repos, station, manager):
        """Test 00:00 UTC (05:30 locali) precede l'apertura delle 06:00."""
        _, _, assignment_id = await self._open(services, station, manager)

        with pytest.raises(ValidationError):
            await services.nozzles.close_assignment(
                manager,
                assignment_id,
                Decimal("1010.000"),
                fixed_price,
                end_time=datetime(2024, 3, 1, 0, 0, tzinfo=timezone.utc),
            )
        assert repos.assignments.items[assignment_id].status == AssignmentStatus.OPEN

    async def test_aware_start_time_stored_as_station_time(self, services, repos, station, manager):
        worker = station.worker("arun")
        nozzle = station.nozzle()
        shift = station.shift(worker)

        assignment_id = await services.nozzles.open_assignment(
            manager, nozzle.id, worker.id, shift.id, Decimal("1000"),
            start_time=datetime(2024, 3, 1, 0, 30, tzinfo=timezone.utc),
        )

        assert repos.assignments.items[assignment_id].start_time == datetime(2024, 3, 1, 6, 0)

    async def test_dispensed_below_test_volume_rejected(self, services, repos, station, manager):
        """Test 10 L erogati con 50 L di test: chiusura rifiutata, nulla modificato."""
        nozzle, shift, assignment_id = await self._open(services, station, manager)
        await services.shifts.register_nozzle_test(manager, shift.id, assignment_id, Decimal("50"))

        with pytest.raises(ValidationError):
            await services.nozzles.close_assignment(
                manager, assignment_id, Decimal("1010.000"), fixed_price, end_time=END
            )

        assignment = repos.assignments.items[assignment_id]
        assert assignment.status == AssignmentStatus.OPEN
        assert assignment.closing_balance is None
        assert nozzle.current_reading == Decimal("1000.000")

        totals = await services.shifts.get_totals(shift.id)
        assert totals.fuel_sales == Decimal("0.00")

    async def test_dispensed_equal_to_test_volume_allowed(self, services, station, manager):
        nozzle, shift, assignment_id = await self._open(services, station, manager)
        await services.shifts.register_nozzle_test(manager, shift.id, assignment_id, Decimal("50"))

        await services.nozzles.close_assignment(
            manager, assignment_id, Decimal("1050.000"), fixed_price, end_time=END
        )

        totals = await services.shifts.get_totals(shift.id)
        assert totals.gross_fuel_sales == Decimal("5000.00")
        assert totals.test_value == Decimal("5000.00")
        assert totals.fuel_sales == Decimal("0.00")
