"""
Service Layer per la Contabilità di Turno
Progetto: Fuel Station Manager (Gestionale Distributore)

Riconcilia il contante contato con il contante atteso di un turno chiuso:

    cash_in_hand  = Σ conteggio x taglio
    expected_cash = fondo cassa + vendite + incassi - crediti - spese
                    - UPI - carte - fleet card
    balance       = cash_in_hand - expected_cash

Gli aggregati del turno sono copiati alla creazione e restano tali anche
se buoni o incassi cambiano dopo. L'aggiornamento (solo manager/admin)
ricalcola dal turno attuale.

Un ammanco oltre soglia genera un anticipo sullo stipendio del gestore.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from app.core.clock import station_now
from app.core.config import DENOMINATION_COLUMNS, Settings, get_settings
from app.core.exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from app.core.money import sum_money, to_money
from app.core.permissions import verify_supervisor, verify_worker_access
from app.models.salary import SalaryPayment
from app.models.shift import Shift
from app.models.shift_accounting import ShiftAccounting
from app.schemas.actor import Actor
from app.schemas.enums import PaymentMethod
from app.schemas.shift import ShiftTotals
from app.schemas.shift_accounting import (
    DenominationCounts,
    ElectronicTotals,
    ReconciliationResult,
)

# Logger per questo modulo
logger = logging.getLogger(__name__)


# ------------------------------------------------------------
# Calcolo
# ------------------------------------------------------------

@dataclass(frozen=True)
class ReconciliationFigures:
    """Valori derivati di una riconciliazione."""

    cash_in_hand: Decimal
    expected_cash: Decimal
    balance: Decimal
    system_received_amount: Decimal


def compute_cash_in_hand(counts: dict[int, int]) -> Decimal:
    """Σ conteggio x valore facciale."""
    return sum_money(Decimal(face) * count for face, count in counts.items())


def compute_reconciliation(
    opening_cash: Decimal,
    totals: ShiftTotals,
    electronic: ElectronicTotals,
    denominations: DenominationCounts,
) -> ReconciliationFigures:
    cash_in_hand = compute_cash_in_hand(denominations.by_face_value())
    expected = to_money(
        to_money(opening_cash)
        + totals.fuel_sales
        + totals.payments
        - totals.credit
        - totals.expenses
        - to_money(electronic.upi)
        - to_money(electronic.card)
        - to_money(electronic.fleet_card)
    )
    return ReconciliationFigures(
        cash_in_hand=cash_in_hand,
        expected_cash=expected,
        balance=to_money(cash_in_hand - expected),
        system_received_amount=to_money(totals.fuel_sales + totals.payments),
    )


def build_advance_reference(username: str, shift_start: datetime) -> str:
    """Riferimento leggibile dell'anticipo: ADV-<utente>-<ggmmaa-HHMM>."""
    return f"ADV-{username[:15]}-{shift_start:%d%m%y-%H%M}"


class ShiftAccountingService:
    """
    Service per creazione, aggiornamento e cancellazione della contabilità.

    Il turno è bloccato (SELECT ... FOR UPDATE) per tutta l'operazione;
    il vincolo unico su shift_id copre le corse residue.
    """

    def __init__(
        self,
        shifts,
        accountings,
        shift_service,
        salary_payments,
        workers,
        settings: Optional[Settings] = None,
    ) -> None:
        self.shifts = shifts
        self.accountings = accountings
        self.shift_service = shift_service
        self.salary_payments = salary_payments
        self.workers = workers
        self.settings = settings or get_settings()

    # ------------------------------------------------------------
    # Validazione
    # ------------------------------------------------------------

    def _validate(self, electronic: ElectronicTotals, denominations: DenominationCounts) -> None:
        """
        Controlla gli input prima di qualsiasi modifica.

        Raises:
            ValidationError: importi o conteggi negativi, tagli non abilitati
        """
        for label, value in (
            ("UPI", electronic.upi),
            ("carte", electronic.card),
            ("fleet card", electronic.fleet_card),
        ):
            if to_money(value) < 0:
                raise ValidationError(f"Il totale {label} non può essere negativo")

        enabled = set(self.settings.cash_denominations)
        for face, count in denominations.by_face_value().items():
            if count < 0:
                raise ValidationError(
                    f"Il numero di pezzi da {face} non può essere negativo",
                    extra={"field": DENOMINATION_COLUMNS[face]},
                )
            if count and face not in enabled:
                raise ValidationError(
                    f"Il taglio da {face} non è abilitato per questo distributore",
                    extra={"field": DENOMINATION_COLUMNS[face]},
                )

    async def _get_locked_shift(self, shift_id: uuid.UUID) -> Shift:
        shift = await self.shifts.get_for_update(shift_id)
        if not shift:
            raise NotFoundError(f"Turno {shift_id} non trovato")
        return shift

    async def _require_accounting(self, shift_id: uuid.UUID) -> ShiftAccounting:
        accounting = await self.accountings.get_by_shift(shift_id)
        if not accounting:
            raise NotFoundError(f"Contabilità del turno {shift_id} non trovata")
        return accounting

    # ------------------------------------------------------------
    # Operazioni
    # ------------------------------------------------------------

    async def create(
        self,
        actor: Actor,
        shift_id: uuid.UUID,
        electronic_totals: ElectronicTotals,
        denominations: DenominationCounts,
    ) -> ReconciliationResult:
        """
        Crea la contabilità di un turno chiuso congelandone gli aggregati.

        Raises:
            NotFoundError: turno inesistente
            InvalidStateError: turno non ancora chiuso
            ConflictError: contabilità già presente
            ValidationError: importi o conteggi non validi
        """
        self._validate(electronic_totals, denominations)

        shift = await self._get_locked_shift(shift_id)
        verify_worker_access(actor, shift.worker_id)

        if not shift.is_closed:
            raise InvalidStateError("La contabilità si registra solo su turni chiusi")
        if shift.is_accounting_done or await self.accountings.get_by_shift(shift_id):
            raise ConflictError("La contabilità di questo turno esiste già")

        totals = await self.shift_service.get_totals(shift_id)
        accounting = ShiftAccounting(id=uuid.uuid4(), shift_id=shift_id, entry_by=actor.username)
        figures = self._apply(accounting, shift, totals, electronic_totals, denominations)

        await self._sync_advance_payment(actor, shift, accounting)
        await self.accountings.add(accounting)

        shift.is_accounting_done = True
        await self.shifts.save(shift)

        logger.info(
            "Contabilità turno %s: contante %s, atteso %s, differenza %s",
            shift_id, figures.cash_in_hand, figures.expected_cash, figures.balance,
        )
        return ReconciliationResult.from_model(accounting)

    async def update(
        self,
        actor: Actor,
        shift_id: uuid.UUID,
        electronic_totals: ElectronicTotals,
        denominations: DenominationCounts,
    ) -> ReconciliationResult:
        """
        Ricalcola la contabilità dai dati attuali del turno.

        Raises:
            AuthorizationError: operatore non manager/admin
            NotFoundError: turno o contabilità inesistente
        """
        verify_supervisor(actor)
        self._validate(electronic_totals, denominations)

        shift = await self._get_locked_shift(shift_id)
        accounting = await self._require_accounting(shift_id)

        totals = await self.shift_service.get_totals(shift_id)
        figures = self._apply(accounting, shift, totals, electronic_totals, denominations)
        accounting.entry_by = actor.username

        await self._sync_advance_payment(actor, shift, accounting)
        await self.accountings.save(accounting)

        logger.info("Aggiornata contabilità turno %s: differenza %s", shift_id, figures.balance)
        return ReconciliationResult.from_model(accounting)

    async def delete(self, actor: Actor, shift_id: uuid.UUID) -> None:
        """
        Elimina la contabilità (e l'eventuale anticipo) e riapre il turno
        a una nuova contabilità.
        """
        verify_supervisor(actor)
        shift = await self._get_locked_shift(shift_id)
        accounting = await self._require_accounting(shift_id)

        advance_id = accounting.advance_payment_id
        accounting.advance_payment_id = None
        if advance_id is not None:
            await self._delete_advance(advance_id)

        await self.accountings.delete(accounting)
        shift.is_accounting_done = False
        await self.shifts.save(shift)
        logger.info("Eliminata contabilità turno %s", shift_id)

    async def get(self, actor: Actor, shift_id: uuid.UUID) -> ReconciliationResult:
        """Restituisce i valori memorizzati, senza ricalcolo."""
        shift = await self.shifts.get(shift_id)
        if not shift:
            raise NotFoundError(f"Turno {shift_id} non trovato")
        verify_worker_access(actor, shift.worker_id)
        return ReconciliationResult.from_model(await self._require_accounting(shift_id))

    # ------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------

    def _apply(
        self,
        accounting: ShiftAccounting,
        shift: Shift,
        totals: ShiftTotals,
        electronic: ElectronicTotals,
        denominations: DenominationCounts,
    ) -> ReconciliationFigures:
        figures = compute_reconciliation(shift.opening_cash, totals, electronic, denominations)

        accounting.opening_cash = to_money(shift.opening_cash)
        accounting.fuel_sales = totals.fuel_sales
        accounting.credit_amount = totals.credit
        accounting.payments_amount = totals.payments
        accounting.expenses_amount = totals.expenses
        accounting.system_received_amount = figures.system_received_amount

        accounting.upi_amount = to_money(electronic.upi)
        accounting.card_amount = to_money(electronic.card)
        accounting.fleet_card_amount = to_money(electronic.fleet_card)
        for face, count in denominations.by_face_value().items():
            setattr(accounting, DENOMINATION_COLUMNS[face], count)

        accounting.cash_in_hand = figures.cash_in_hand
        accounting.expected_cash = figures.expected_cash
        accounting.balance_amount = figures.balance
        return figures

    def _shortage_note(self, username: str, shift: Shift, amount: Decimal) -> str:
        return (
            f"Cash shortage of {self.settings.currency_symbol}{amount} from shift "
            f"({username} - {shift.start_datetime:%d-%b-%Y %H:%M}). "
            "Will be deducted from salary."
        )

    async def _delete_advance(self, payment_id: uuid.UUID) -> None:
        payment = await self.salary_payments.get(payment_id)
        if payment is not None:
            await self.salary_payments.delete(payment)
            logger.info("Rimosso anticipo %s", payment_id)

    async def _sync_advance_payment(
        self,
        actor: Actor,
        shift: Shift,
        accounting: ShiftAccounting,
    ) -> None:
        """
        Allinea l'anticipo sull'ammanco della contabilità.

        Ammanco >= soglia: crea o aggiorna l'anticipo; altrimenti lo rimuove.
        """
        balance = accounting.balance_amount
        shortage = to_money(-balance)
        needs_advance = balance < 0 and shortage >= self.settings.advance_payment_threshold

        if not needs_advance:
            if accounting.advance_payment_id is not None:
                advance_id = accounting.advance_payment_id
                accounting.advance_payment_id = None
                await self._delete_advance(advance_id)
            return

        worker = await self.workers.get(shift.worker_id)
        if not worker:
            raise NotFoundError(f"Dipendente {shift.worker_id} non trovato")

        existing = None
        if accounting.advance_payment_id is not None:
            existing = await self.salary_payments.get(accounting.advance_payment_id)

        if existing is not None:
            existing.amount = shortage
            existing.payment_date = station_now(self.settings.station_timezone)
            existing.notes = self._shortage_note(worker.username, shift, shortage)
            await self.salary_payments.save(existing)
            logger.info("Aggiornato anticipo %s a %s", existing.id, shortage)
            return

        payment = SalaryPayment(
            id=uuid.uuid4(),
            worker_id=shift.worker_id,
            amount=shortage,
            payment_date=station_now(self.settings.station_timezone),
            calculated_salary_id=None,
            payment_method=PaymentMethod.CASH,
            reference_number=build_advance_reference(worker.username, shift.start_datetime),
            notes=self._shortage_note(worker.username, shift, shortage),
            entry_by=actor.username,
        )
        await self.salary_payments.add(payment)
        accounting.advance_payment_id = payment.id
        logger.info(
            "Creato anticipo di %s per %s dal turno %s",
            shortage, worker.username, shift.id,
        )
