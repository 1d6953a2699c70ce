"""
Service Layer per il Partitario Dipendente
Progetto: Fuel Station Manager (Gestionale Distributore)

Il partitario è costruito a richiesta: gli stipendi calcolati sono
accrediti, i pagamenti (anticipi compresi) sono addebiti.

    saldo_prima = saldo iniziale
                  + Σ stipendi con data calcolo < dal
                  - Σ pagamenti prima delle 00:00 di "dal"

Nel periodo gli stipendi sono posizionati all'inizio del giorno di
calcolo, i pagamenti all'orario esatto. A parità di orario lo stipendio
precede il pagamento; a parità di tipo vale l'ordine del repository
(data, creazione, id).
"""

import logging
import uuid
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Sequence

from app.core.clock import to_station_time
from app.core.exceptions import NotFoundError, ValidationError
from app.core.money import ZERO_MONEY, sum_money, to_money
from app.core.permissions import verify_worker_access
from app.models.salary import CalculatedSalary, SalaryPayment
from app.schemas.actor import Actor
from app.schemas.employee_ledger import LedgerEntry, LedgerStatement, LedgerSummary
from app.schemas.enums import LedgerDirection, LedgerSourceType

# Logger per questo modulo
logger = logging.getLogger(__name__)

SALARY_ACTION = "Salary Calculated"
PAYMENT_ACTION = "Payment Made"

# Priorità a parità di orario
_SOURCE_ORDER = {LedgerSourceType.SALARY: 0, LedgerSourceType.PAYMENT: 1}


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def salary_description(salary: CalculatedSalary) -> str:
    return f"Salary for {salary.from_date} to {salary.to_date} ({salary.total_days} days)"


def payment_description(payment: SalaryPayment) -> str:
    notes = f" - {payment.notes}" if payment.notes else ""
    method = payment.payment_method.value if payment.payment_method else "-"
    return f"Payment via {method} (Ref: {payment.reference_number}){notes}"


def merge_ledger_entries(
    balance_before: Decimal,
    salaries: Sequence[CalculatedSalary],
    payments: Sequence[SalaryPayment],
) -> list[LedgerEntry]:
    """
    Fonde stipendi e pagamenti in ordine cronologico con saldo progressivo.

    Args:
        balance_before: Saldo di partenza
        salaries: Stipendi del periodo, nell'ordine del repository
        payments: Pagamenti del periodo, nell'ordine del repository

    Returns:
        list[LedgerEntry]: una riga per elemento, con il saldo dopo la riga
    """
    items = [
        (start_of_day(s.calculation_date), LedgerSourceType.SALARY, index, s)
        for index, s in enumerate(salaries)
    ] + [
        (to_station_time(p.payment_date), LedgerSourceType.PAYMENT, index, p)
        for index, p in enumerate(payments)
    ]
    # Orario, poi stipendi prima dei pagamenti, poi ordine del repository
    items.sort(key=lambda item: (item[0], _SOURCE_ORDER[item[1]], item[2]))

    balance = to_money(balance_before)
    entries: list[LedgerEntry] = []
    for timestamp, source_type, _, record in items:
        if source_type == LedgerSourceType.SALARY:
            amount = to_money(record.net_salary)
            balance = to_money(balance + amount)
            entries.append(
                LedgerEntry(
                    date_time=timestamp,
                    direction=LedgerDirection.CREDIT,
                    action=SALARY_ACTION,
                    amount=amount,
                    credit_amount=amount,
                    debit_amount=ZERO_MONEY,
                    balance=balance,
                    description=salary_description(record),
                    source_type=source_type,
                    source_id=record.id,
                )
            )
        elif source_type == LedgerSourceType.PAYMENT:
            amount = to_money(record.amount)
            balance = to_money(balance - amount)
            entries.append(
                LedgerEntry(
                    date_time=timestamp,
                    direction=LedgerDirection.DEBIT,
                    action=PAYMENT_ACTION,
                    amount=amount,
                    credit_amount=ZERO_MONEY,
                    debit_amount=amount,
                    balance=balance,
                    description=payment_description(record),
                    source_type=source_type,
                    source_id=record.id,
                    reference_number=record.reference_number,
                    payment_method=record.payment_method,
                )
            )
        else:
            raise ValueError(f"Origine partitario sconosciuta: {source_type}")
    return entries


class EmployeeLedgerService:
    """Service per il partitario stipendi di un dipendente."""

    def __init__(self, workers, salaries, payments) -> None:
        self.workers = workers
        self.salaries = salaries
        self.payments = payments

    async def _get_worker(self, actor: Actor, worker_id: uuid.UUID):
        verify_worker_access(actor, worker_id)
        worker = await self.workers.get(worker_id)
        if not worker:
            raise NotFoundError(f"Dipendente {worker_id} non trovato")
        return worker

    async def build_ledger(
        self,
        actor: Actor,
        worker_id: uuid.UUID,
        from_date: date,
        to_date: date,
    ) -> LedgerStatement:
        """
        Costruisce il partitario del dipendente per il periodo [from_date, to_date].

        Raises:
            ValidationError: from_date successiva a to_date
            NotFoundError: dipendente inesistente
            AuthorizationError: un gestore legge solo il proprio partitario
        """
        if from_date > to_date:
            raise ValidationError("La data iniziale non può essere successiva a quella finale")

        worker = await self._get_worker(actor, worker_id)
        range_start = start_of_day(from_date)
        range_end = start_of_day(to_date + timedelta(days=1))

        opening = to_money(worker.opening_balance)
        salaries_before = to_money(await self.salaries.total_net_before(worker_id, from_date))
        payments_before = to_money(await self.payments.total_before(worker_id, range_start))
        balance_before = to_money(opening + salaries_before - payments_before)

        salaries = await self.salaries.list_for_worker(worker_id, from_date, to_date)
        payments = await self.payments.list_for_worker(worker_id, range_start, range_end)

        entries = merge_ledger_entries(balance_before, salaries, payments)

        salaries_in_range = sum_money(s.net_salary for s in salaries)
        payments_in_range = sum_money(p.amount for p in payments)
        closing = entries[-1].balance if entries else balance_before

        logger.debug(
            "Partitario %s dal %s al %s: %s righe, saldo finale %s",
            worker.username, from_date, to_date, len(entries), closing,
        )

        return LedgerStatement(
            worker_id=worker_id,
            from_date=from_date,
            to_date=to_date,
            entries=entries,
            summary=LedgerSummary(
                opening_balance=opening,
                opening_balance_date=worker.opening_balance_date,
                total_salaries_before=salaries_before,
                total_payments_before=payments_before,
                balance_before=balance_before,
                total_salaries_in_range=salaries_in_range,
                total_payments_in_range=payments_in_range,
                total_salaries_till_date=to_money(salaries_before + salaries_in_range),
                total_payments_till_date=to_money(payments_before + payments_in_range),
                closing_balance=closing,
            ),
        )

    async def current_balance(
        self,
        actor: Actor,
        worker_id: uuid.UUID,
        as_of: date,
    ) -> Decimal:
        """Saldo del dipendente a fine giornata as_of."""
        worker = await self._get_worker(actor, worker_id)
        cutoff = as_of + timedelta(days=1)
        salaries = await self.salaries.total_net_before(worker_id, cutoff)
        payments = await self.payments.total_before(worker_id, start_of_day(cutoff))
        return to_money(to_money(worker.opening_balance) + to_money(salaries) - to_money(payments))
