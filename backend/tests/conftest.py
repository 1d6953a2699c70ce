"""
Pytest configuration and fixtures per i service del distributore.

I service ricevono i repository dal chiamante: qui sono sostituiti da
repository in memoria con la stessa interfaccia.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace
from typing import Optional

import pytest

from app.core.config import Settings
from app.core.exceptions import ConflictError, NotFoundError
from app.models.nozzle import Nozzle, NozzleAssignment
from app.models.salary import CalculatedSalary, SalaryPayment
from app.models.shift import CreditBill, Shift, ShiftExpense, ShiftPayment
from app.models.worker import Worker
from app.schemas.actor import Actor
from app.schemas.enums import AssignmentStatus, PaymentMethod, Role, ShiftStatus
from app.services.employee_ledger_service import EmployeeLedgerService
from app.services.nozzle_assignment_service import NozzleAssignmentService
from app.services.shift_accounting_service import ShiftAccountingService
from app.services.shift_service import ShiftService


# ============================================================
# Repository in memoria
# ============================================================


class FakeRepository:
    """Repository in memoria: mantiene l'ordine di inserimento."""

    def __init__(self) -> None:
        self.items: dict[uuid.UUID, object] = {}
        self.locked: list[uuid.UUID] = []
        self.saved: list[object] = []

    async def get(self, obj_id):
        return self.items.get(obj_id)

    async def get_for_update(self, obj_id):
        self.locked.append(obj_id)
        return self.items.get(obj_id)

    async def add(self, obj):
        if getattr(obj, "id", None) is None:
            obj.id = uuid.uuid4()
        self.items[obj.id] = obj
        return obj

    async def save(self, obj):
        self.saved.append(obj)
        return obj

    async def delete(self, obj) -> None:
        self.items.pop(obj.id, None)

    def all(self) -> list:
        return list(self.items.values())


class FakeNozzleAssignmentRepository(FakeRepository):
    async def add(self, obj):
        # Vincolo unico parziale: una sola assegnazione OPEN per erogatore
        for other in self.items.values():
            if other.nozzle_id == obj.nozzle_id and other.status == AssignmentStatus.OPEN:
                raise ConflictError("L'erogatore ha già un'assegnazione aperta")
        return await super().add(obj)

    async def find_open_by_nozzle(self, nozzle_id):
        for a in self.items.values():
            if a.nozzle_id == nozzle_id and a.status == AssignmentStatus.OPEN:
                return a
        return None

    async def list_for_shift(self, shift_id):
        return [a for a in self.items.values() if a.shift_id == shift_id]

    async def list_closed_for_shift(self, shift_id):
        return [
            a for a in self.items.values()
            if a.shift_id == shift_id and a.status == AssignmentStatus.CLOSED
        ]

    async def count_open_for_shift(self, shift_id):
        return sum(
            1 for a in self.items.values()
            if a.shift_id == shift_id and a.status == AssignmentStatus.OPEN
        )


class FakeNozzleTestRepository(FakeRepository):
    async def list_for_shift(self, shift_id):
        return [t for t in self.items.values() if t.shift_id == shift_id]

    async def exists_for_assignment(self, assignment_id):
        return any(t.assignment_id == assignment_id for t in self.items.values())

    async def sum_for_assignment(self, assignment_id):
        return sum(
            (t.test_quantity for t in self.items.values() if t.assignment_id == assignment_id),
            Decimal("0"),
        )


class FakeShiftRepository(FakeRepository):
    async def find_open_for_worker(self, worker_id):
        for s in self.items.values():
            if s.worker_id == worker_id and s.status == ShiftStatus.OPEN:
                return s
        return None


class FakeShiftTransactionRepository(FakeRepository):
    async def list_credit_bills(self, shift_id):
        return [
            o for o in self.items.values()
            if isinstance(o, CreditBill) and o.shift_id == shift_id
        ]

    async def list_payments(self, shift_id):
        return [
            o for o in self.items.values()
            if isinstance(o, ShiftPayment) and o.shift_id == shift_id
        ]

    async def list_expenses(self, shift_id):
        return [
            o for o in self.items.values()
            if isinstance(o, ShiftExpense) and o.shift_id == shift_id
        ]


class FakeShiftAccountingRepository(FakeRepository):
    async def add(self, obj):
        # Vincolo unico su shift_id
        if any(a.shift_id == obj.shift_id for a in self.items.values()):
            raise ConflictError("La contabilità di questo turno esiste già")
        return await super().add(obj)

    async def get_by_shift(self, shift_id):
        for a in self.items.values():
            if a.shift_id == shift_id:
                return a
        return None


class FakeCalculatedSalaryRepository(FakeRepository):
    async def list_for_worker(self, worker_id, from_date=None, to_date=None):
        rows = [
            s for s in self.items.values()
            if s.worker_id == worker_id
            and (from_date is None or s.calculation_date >= from_date)
            and (to_date is None or s.calculation_date <= to_date)
        ]
        return sorted(rows, key=lambda s: s.calculation_date)

    async def total_net_before(self, worker_id, before):
        return sum(
            (s.net_salary for s in self.items.values()
             if s.worker_id == worker_id and s.calculation_date < before),
            Decimal("0"),
        )


class FakeSalaryPaymentRepository(FakeRepository):
    async def list_for_worker(self, worker_id, start=None, end=None):
        rows = [
            p for p in self.items.values()
            if p.worker_id == worker_id
            and (start is None or p.payment_date >= start)
            and (end is None or p.payment_date < end)
        ]
        return sorted(rows, key=lambda p: p.payment_date)

    async def total_before(self, worker_id, before):
        return sum(
            (p.amount for p in self.items.values()
             if p.worker_id == worker_id and p.payment_date < before),
            Decimal("0"),
        )


class FakeProductPriceRepository:
    def __init__(self) -> None:
        self.prices: dict[uuid.UUID, list[tuple[datetime, Decimal]]] = {}

    def set_price(self, product_id, unit_price, effective_from=datetime(2000, 1, 1)):
        self.prices.setdefault(product_id, []).append((effective_from, Decimal(unit_price)))

    async def resolve_unit_price(self, product_id, at):
        valid = [(since, p) for since, p in self.prices.get(product_id, []) if since <= at]
        if not valid:
            raise NotFoundError(f"Nessun prezzo in vigore per il prodotto {product_id}")
        return max(valid, key=lambda item: item[0])[1]


# ============================================================
# Fixtures per repository e service
# ============================================================


@pytest.fixture
def settings():
    """Impostazioni di default, senza leggere .env."""
    return Settings(_env_file=None)


@pytest.fixture
def repos():
    return SimpleNamespace(
        workers=FakeRepository(),
        nozzles=FakeRepository(),
        assignments=FakeNozzleAssignmentRepository(),
        tests=FakeNozzleTestRepository(),
        shifts=FakeShiftRepository(),
        transactions=FakeShiftTransactionRepository(),
        accountings=FakeShiftAccountingRepository(),
        salaries=FakeCalculatedSalaryRepository(),
        salary_payments=FakeSalaryPaymentRepository(),
        prices=FakeProductPriceRepository(),
    )


def build_services(repos, settings):
    shift_service = ShiftService(
        shifts=repos.shifts,
        assignments=repos.assignments,
        tests=repos.tests,
        transactions=repos.transactions,
        workers=repos.workers,
        settings=settings,
    )
    return SimpleNamespace(
        shifts=shift_service,
        nozzles=NozzleAssignmentService(
            assignments=repos.assignments,
            nozzles=repos.nozzles,
            shifts=repos.shifts,
            tests=repos.tests,
            prices=repos.prices,
            settings=settings,
        ),
        accounting=ShiftAccountingService(
            shifts=repos.shifts,
            accountings=repos.accountings,
            shift_service=shift_service,
            salary_payments=repos.salary_payments,
            workers=repos.workers,
            settings=settings,
        ),
        ledger=EmployeeLedgerService(
            workers=repos.workers,
            salaries=repos.salaries,
            payments=repos.salary_payments,
        ),
    )


@pytest.fixture
def services(repos, settings):
    return build_services(repos, settings)


# ============================================================
# Dati di base
# ============================================================


class Station:
    """Helper per popolare i repository in memoria."""

    def __init__(self, repos) -> None:
        self.repos = repos

    def worker(self, username="ravi", role=Role.SALESMAN, opening_balance="0.00",
               opening_balance_date: Optional[date] = None) -> Worker:
        worker = Worker(
            id=uuid.uuid4(),
            username=username,
            role=role,
            opening_balance=Decimal(opening_balance),
            opening_balance_date=opening_balance_date,
        )
        self.repos.workers.items[worker.id] = worker
        return worker

    def nozzle(self, name="P1-N1", reading="1000.000", unit_price="100.00") -> Nozzle:
        nozzle = Nozzle(
            id=uuid.uuid4(),
            name=name,
            product_id=uuid.uuid4(),
            current_reading=Decimal(reading),
            previous_reading=Decimal("0.000"),
        )
        self.repos.nozzles.items[nozzle.id] = nozzle
        if unit_price is not None:
            self.repos.prices.set_price(nozzle.product_id, unit_price)
        return nozzle

    def shift(self, worker: Worker, opening_cash="0.00", status=ShiftStatus.OPEN,
              start=datetime(2024, 3, 1, 6, 0)) -> Shift:
        shift = Shift(
            id=uuid.uuid4(),
            worker_id=worker.id,
            start_datetime=start,
            opening_cash=Decimal(opening_cash),
            status=status,
            is_accounting_done=False,
        )
        self.repos.shifts.items[shift.id] = shift
        return shift

    def closed_assignment(self, shift: Shift, nozzle: Nozzle, opening, closing,
                          unit_price="100.00", cached=True) -> NozzleAssignment:
        """Assegnazione già chiusa (anche senza valori memorizzati)."""
        opening, closing = Decimal(opening), Decimal(closing)
        price = Decimal(unit_price) if unit_price is not None else None
        dispensed = closing - opening
        assignment = NozzleAssignment(
            id=uuid.uuid4(),
            nozzle_id=nozzle.id,
            worker_id=shift.worker_id,
            shift_id=shift.id,
            start_time=shift.start_datetime,
            end_time=shift.start_datetime,
            opening_balance=opening,
            closing_balance=closing,
            status=AssignmentStatus.CLOSED,
            unit_price=price,
            dispensed_amount=dispensed if cached else None,
            total_amount=(dispensed * price).quantize(Decimal("0.01")) if cached and price else None,
        )
        self.repos.assignments.items[assignment.id] = assignment
        return assignment

    def salary(self, worker: Worker, calculation_date: date, net: str,
               from_date: Optional[date] = None, to_date: Optional[date] = None,
               total_days=30) -> CalculatedSalary:
        salary = CalculatedSalary(
            id=uuid.uuid4(),
            worker_id=worker.id,
            from_date=from_date or calculation_date.replace(day=1),
            to_date=to_date or calculation_date,
            calculation_date=calculation_date,
            total_days=total_days,
            net_salary=Decimal(net),
        )
        self.repos.salaries.items[salary.id] = salary
        return salary

    def payment(self, worker: Worker, paid_at: datetime, amount: str,
                reference="PAY-1", method=PaymentMethod.CASH, notes=None,
                salary: Optional[CalculatedSalary] = None) -> SalaryPayment:
        payment = SalaryPayment(
            id=uuid.uuid4(),
            worker_id=worker.id,
            amount=Decimal(amount),
            payment_date=paid_at,
            calculated_salary_id=salary.id if salary else None,
            reference_number=reference,
            payment_method=method,
            notes=notes,
        )
        self.repos.salary_payments.items[payment.id] = payment
        return payment


@pytest.fixture
def station(repos):
    return Station(repos)


# ============================================================
# Operatori
# ============================================================


@pytest.fixture
def salesman_worker(station):
    return station.worker("ravi", Role.SALESMAN)


@pytest.fixture
def salesman(salesman_worker):
    """Gestore: opera solo sui propri turni, senza retrodatare."""
    return Actor(id=salesman_worker.id, username=salesman_worker.username, role=Role.SALESMAN)


@pytest.fixture
def manager():
    return Actor(id=uuid.uuid4(), username="manager", role=Role.MANAGER)


@pytest.fixture
def admin():
    return Actor(id=uuid.uuid4(), username="admin", role=Role.ADMIN)
