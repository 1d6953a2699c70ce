"""
Service Layer per i Turni
Progetto: Fuel Station Manager (Gestionale Distributore)

Definisce apertura/chiusura turno, i movimenti del turno (test
erogatore, buoni a credito, incassi, spese) e l'aggregazione dei totali.

Gli aggregati non sono mai memorizzati sul turno: si ricalcolano dai
figli ad ogni lettura. Solo la contabilità ne congela una fotografia.
"""

import logging
import uuid
from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from app.core.clock import station_now, to_station_time
from app.core.config import Settings, get_settings
from app.core.exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from app.core.money import ZERO_MONEY, sum_money, sum_volume, to_money, to_volume
from app.core.permissions import verify_backdate, verify_can_modify_shift
from app.models.nozzle import NozzleAssignment, NozzleTest
from app.models.shift import CreditBill, Shift, ShiftExpense, ShiftPayment
from app.schemas.actor import Actor
from app.schemas.enums import AssignmentStatus, ShiftStatus
from app.schemas.shift import ShiftTotals
from app.services.nozzle_assignment_service import dispensed_amount_of, total_amount_of

# Logger per questo modulo
logger = logging.getLogger(__name__)


# ------------------------------------------------------------
# Aggregazione
# ------------------------------------------------------------

def _test_value(assignment: NozzleAssignment, quantity: Decimal) -> Decimal:
    """Valore del carburante di prova al prezzo catturato alla chiusura."""
    if quantity == 0:
        return ZERO_MONEY
    if assignment.unit_price is None:
        logger.warning(
            "Assegnazione %s senza prezzo catturato: test di %s non valorizzati",
            assignment.id, quantity,
        )
        return ZERO_MONEY
    return to_money(quantity * to_money(assignment.unit_price))


def compute_shift_totals(
    shift_id: uuid.UUID,
    assignments: Iterable[NozzleAssignment],
    tests: Iterable[NozzleTest],
    credit_bills: Iterable[CreditBill] = (),
    payments: Iterable[ShiftPayment] = (),
    expenses: Iterable[ShiftExpense] = (),
) -> ShiftTotals:
    """
    Calcola gli aggregati di un turno a partire dai suoi figli.

    Le vendite comprendono solo le assegnazioni chiuse; i test sulle
    assegnazioni chiuse sono sottratti allo stesso prezzo unitario.
    """
    open_count = 0
    closed: list[NozzleAssignment] = []
    for assignment in assignments:
        if assignment.status == AssignmentStatus.OPEN:
            open_count += 1
        elif assignment.status == AssignmentStatus.CLOSED:
            closed.append(assignment)
        else:
            raise ValueError(f"Stato assegnazione sconosciuto: {assignment.status}")

    test_quantities: dict[uuid.UUID, Decimal] = defaultdict(Decimal)
    for test in tests:
        test_quantities[test.assignment_id] += to_volume(test.test_quantity)

    gross = sum_money(total_amount_of(a) for a in closed)
    test_value = sum_money(_test_value(a, test_quantities.get(a.id, Decimal(0))) for a in closed)

    return ShiftTotals(
        shift_id=shift_id,
        gross_fuel_sales=gross,
        test_value=test_value,
        fuel_sales=to_money(gross - test_value),
        total_dispensed=sum_volume(dispensed_amount_of(a) for a in closed),
        total_test_quantity=sum_volume(test_quantities.get(a.id) for a in closed),
        credit=sum_money(b.net_amount for b in credit_bills),
        payments=sum_money(p.amount for p in payments),
        expenses=sum_money(e.amount for e in expenses),
        open_nozzle_count=open_count,
        closed_nozzle_count=len(closed),
    )


def _non_negative_money(value: Decimal, label: str) -> Decimal:
    amount = to_money(value)
    if amount < 0:
        raise ValidationError(f"{label} non può essere negativo")
    return amount


class ShiftService:
    """
    Service per la gestione dei turni.

    Riceve i repository dal chiamante; non fa commit.
    """

    def __init__(
        self,
        shifts,
        assignments,
        tests,
        transactions,
        workers,
        settings: Optional[Settings] = None,
    ) -> None:
        self.shifts = shifts
        self.assignments = assignments
        self.tests = tests
        self.transactions = transactions
        self.workers = workers
        self.settings = settings or get_settings()

    def _when(self, requested: Optional[datetime]) -> datetime:
        """Orario richiesto in ora locale del distributore, default adesso."""
        if requested is None:
            return station_now(self.settings.station_timezone)
        return to_station_time(requested, self.settings.station_timezone)

    async def _get_shift(self, shift_id: uuid.UUID, for_update: bool = False) -> Shift:
        if for_update:
            shift = await self.shifts.get_for_update(shift_id)
        else:
            shift = await self.shifts.get(shift_id)
        if not shift:
            raise NotFoundError(f"Turno {shift_id} non trovato")
        return shift

    # ------------------------------------------------------------
    # Ciclo di vita
    # ------------------------------------------------------------

    async def start_shift(
        self,
        actor: Actor,
        worker_id: uuid.UUID,
        opening_cash: Decimal = ZERO_MONEY,
        start_datetime: Optional[datetime] = None,
    ) -> Shift:
        """
        Apre un turno per un gestore.

        Raises:
            ValidationError: fondo cassa negativo
            AuthorizationError: un gestore apre solo i propri turni
            NotFoundError: dipendente inesistente
            ConflictError: il gestore ha già un turno aperto
        """
        verify_backdate(actor, start_datetime)
        cash = _non_negative_money(opening_cash, "Il fondo cassa")
        verify_can_modify_shift(actor, worker_id, shift_open=True)

        worker = await self.workers.get(worker_id)
        if not worker:
            raise NotFoundError(f"Dipendente {worker_id} non trovato")

        existing = await self.shifts.find_open_for_worker(worker_id)
        if existing is not None:
            raise ConflictError(
                f"{worker.username} ha già un turno aperto",
                extra={"shift_id": str(existing.id)},
            )

        shift = Shift(
            id=uuid.uuid4(),
            worker_id=worker_id,
            start_datetime=self._when(start_datetime),
            opening_cash=cash,
            status=ShiftStatus.OPEN,
            is_accounting_done=False,
            entry_by=actor.username,
        )
        await self.shifts.add(shift)
        logger.info("Aperto turno %s per %s", shift.id, worker.username)
        return shift

    async def close_shift(
        self,
        actor: Actor,
        shift_id: uuid.UUID,
        end_datetime: Optional[datetime] = None,
    ) -> Shift:
        """
        Chiude il turno registrando l'orario di fine.

        Non congela nulla: buoni e incassi restano correggibili fino
        alla contabilità.

        Raises:
            NotFoundError: turno inesistente
            InvalidStateError: turno già chiuso o erogatori ancora aperti
            ValidationError: fine precedente all'inizio
        """
        verify_backdate(actor, end_datetime)
        shift = await self._get_shift(shift_id, for_update=True)

        if shift.is_closed:
            raise InvalidStateError("Il turno è già chiuso")
        verify_can_modify_shift(actor, shift.worker_id, shift.is_open)

        open_count = await self.assignments.count_open_for_shift(shift_id)
        if open_count > 0:
            raise InvalidStateError(
                f"Impossibile chiudere il turno: {open_count} erogatori ancora aperti",
                extra={"open_nozzle_count": open_count},
            )

        end = self._when(end_datetime)
        if end < shift.start_datetime:
            raise ValidationError("La fine del turno non può precedere l'inizio")

        shift.end_datetime = end
        shift.status = ShiftStatus.CLOSED
        await self.shifts.save(shift)
        logger.info("Chiuso turno %s", shift_id)
        return shift

    # ------------------------------------------------------------
    # Movimenti del turno
    # ------------------------------------------------------------

    async def register_nozzle_test(
        self,
        actor: Actor,
        shift_id: uuid.UUID,
        assignment_id: uuid.UUID,
        test_quantity: Decimal,
        test_datetime: Optional[datetime] = None,
        remarks: Optional[str] = None,
    ) -> NozzleTest:
        """
        Registra un test erogatore su un'assegnazione aperta del turno.

        Raises:
            ValidationError: quantità negativa o assegnazione di un altro turno
            InvalidStateError: turno o assegnazione non aperti
        """
        verify_backdate(actor, test_datetime)
        quantity = to_volume(test_quantity)
        if quantity < 0:
            raise ValidationError("La quantità di test non può essere negativa")

        shift = await self._get_shift(shift_id)
        if not shift.is_open:
            raise InvalidStateError("I test erogatore si registrano solo su turni aperti")
        verify_can_modify_shift(actor, shift.worker_id, shift.is_open)

        assignment = await self.assignments.get(assignment_id)
        if not assignment:
            raise NotFoundError(f"Assegnazione {assignment_id} non trovata")
        if assignment.shift_id != shift_id:
            raise ValidationError("L'assegnazione non appartiene a questo turno")
        if not assignment.is_open:
            raise InvalidStateError("I test erogatore si registrano solo su assegnazioni aperte")

        test = NozzleTest(
            id=uuid.uuid4(),
            shift_id=shift_id,
            assignment_id=assignment_id,
            test_datetime=self._when(test_datetime),
            test_quantity=quantity,
            remarks=remarks,
            entry_by=actor.username,
        )
        await self.tests.add(test)
        logger.info("Test erogatore di %s sull'assegnazione %s", quantity, assignment_id)
        return test

    async def _shift_for_transaction(self, actor: Actor, shift_id: uuid.UUID) -> Shift:
        shift = await self._get_shift(shift_id)
        verify_can_modify_shift(actor, shift.worker_id, shift.is_open)
        return shift

    async def add_credit_bill(
        self,
        actor: Actor,
        shift_id: uuid.UUID,
        net_amount: Decimal,
        bill_date: Optional[datetime] = None,
        reference: Optional[str] = None,
    ) -> CreditBill:
        verify_backdate(actor, bill_date)
        amount = _non_negative_money(net_amount, "L'importo del buono")
        await self._shift_for_transaction(actor, shift_id)

        bill = CreditBill(
            id=uuid.uuid4(),
            shift_id=shift_id,
            net_amount=amount,
            bill_date=self._when(bill_date),
            reference=reference,
            entry_by=actor.username,
        )
        await self.transactions.add(bill)
        return bill

    async def add_payment(
        self,
        actor: Actor,
        shift_id: uuid.UUID,
        amount: Decimal,
        payment_date: Optional[datetime] = None,
        reference: Optional[str] = None,
    ) -> ShiftPayment:
        verify_backdate(actor, payment_date)
        value = _non_negative_money(amount, "L'importo dell'incasso")
        await self._shift_for_transaction(actor, shift_id)

        payment = ShiftPayment(
            id=uuid.uuid4(),
            shift_id=shift_id,
            amount=value,
            payment_date=self._when(payment_date),
            reference=reference,
            entry_by=actor.username,
        )
        await self.transactions.add(payment)
        return payment

    async def add_expense(
        self,
        actor: Actor,
        shift_id: uuid.UUID,
        amount: Decimal,
        expense_date: Optional[datetime] = None,
        remarks: Optional[str] = None,
    ) -> ShiftExpense:
        verify_backdate(actor, expense_date)
        value = _non_negative_money(amount, "L'importo della spesa")
        await self._shift_for_transaction(actor, shift_id)

        expense = ShiftExpense(
            id=uuid.uuid4(),
            shift_id=shift_id,
            amount=value,
            expense_date=self._when(expense_date),
            remarks=remarks,
            entry_by=actor.username,
        )
        await self.transactions.add(expense)
        return expense

    # ------------------------------------------------------------
    # Letture
    # ------------------------------------------------------------

    async def get_shift(self, shift_id: uuid.UUID) -> Shift:
        return await self._get_shift(shift_id)

    async def get_totals(self, shift_id: uuid.UUID) -> ShiftTotals:
        """Aggregati del turno calcolati dai dati attuali."""
        await self._get_shift(shift_id)
        return compute_shift_totals(
            shift_id,
            assignments=await self.assignments.list_for_shift(shift_id),
            tests=await self.tests.list_for_shift(shift_id),
            credit_bills=await self.transactions.list_credit_bills(shift_id),
            payments=await self.transactions.list_payments(shift_id),
            expenses=await self.transactions.list_expenses(shift_id),
        )
