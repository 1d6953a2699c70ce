"""
Service Layer per le Assegnazioni Erogatore
Progetto: Fuel Station Manager (Gestionale Distributore)

Ciclo di vita OPEN → CLOSED (terminale, nessuna riapertura).
Alla chiusura il prezzo viene risolto una volta sola e i valori
erogato/incasso sono congelati sull'assegnazione.

Concorrenza: apertura e chiusura bloccano la riga dell'erogatore
(SELECT ... FOR UPDATE); l'indice parziale uq_nozzle_assignments_open_nozzle
trasforma una corsa persa in ConflictError.
"""

import logging
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Awaitable, Callable, Optional, Sequence

from app.core.clock import station_now, to_station_time
from app.core.config import Settings, get_settings
from app.core.exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from app.core.money import ZERO_MONEY, ZERO_VOLUME, to_money, to_volume
from app.core.permissions import verify_backdate, verify_can_modify_shift
from app.models.nozzle import NozzleAssignment
from app.schemas.actor import Actor
from app.schemas.enums import AssignmentStatus
from app.schemas.nozzle_assignment import AssignmentSummary

# Logger per questo modulo
logger = logging.getLogger(__name__)

# (product_id, istante) → prezzo unitario
UnitPriceResolver = Callable[[uuid.UUID, datetime], Awaitable[Decimal]]


# ------------------------------------------------------------
# Calcoli
# ------------------------------------------------------------

def compute_total_amount(dispensed: Decimal, unit_price: Decimal) -> Decimal:
    """Incasso = erogato x prezzo, arrotondato HALF_UP a 2 decimali."""
    return to_money(to_volume(dispensed) * to_money(unit_price))


def dispensed_amount_of(assignment: NozzleAssignment) -> Decimal:
    """
    Volume erogato dell'assegnazione.

    Usa il valore memorizzato alla chiusura; per le righe senza cache
    lo ricalcola dalle letture. Un'assegnazione aperta vale zero.
    """
    if assignment.dispensed_amount is not None:
        return to_volume(assignment.dispensed_amount)
    if assignment.closing_balance is None:
        return ZERO_VOLUME
    return to_volume(assignment.closing_balance - assignment.opening_balance)


def total_amount_of(assignment: NozzleAssignment) -> Decimal:
    """
    Incasso teorico dell'assegnazione.

    Senza cache si ricalcola con il prezzo catturato; se manca anche
    quello l'assegnazione vale zero.
    """
    if assignment.total_amount is not None:
        return to_money(assignment.total_amount)
    if assignment.closing_balance is None:
        return ZERO_MONEY
    if assignment.unit_price is None:
        logger.warning(
            "Assegnazione %s senza incasso memorizzato né prezzo: considerata zero",
            assignment.id,
        )
        return ZERO_MONEY
    return compute_total_amount(dispensed_amount_of(assignment), assignment.unit_price)


class NozzleAssignmentService:
    """
    Service per l'apertura e la chiusura delle assegnazioni erogatore.

    Non dipende da FastAPI: riceve i repository dal chiamante.
    """

    def __init__(
        self,
        assignments,
        nozzles,
        shifts,
        tests,
        prices,
        settings: Optional[Settings] = None,
    ) -> None:
        self.assignments = assignments
        self.nozzles = nozzles
        self.shifts = shifts
        self.tests = tests
        self.prices = prices
        self.settings = settings or get_settings()

    async def open_assignment(
        self,
        actor: Actor,
        nozzle_id: uuid.UUID,
        worker_id: uuid.UUID,
        shift_id: uuid.UUID,
        opening_balance: Decimal,
        start_time: Optional[datetime] = None,
    ) -> uuid.UUID:
        """
        Assegna un erogatore al gestore del turno.

        Args:
            actor: Operatore corrente
            nozzle_id: Erogatore
            worker_id: Gestore (deve essere quello del turno)
            shift_id: Turno aperto
            opening_balance: Lettura totalizzatore all'apertura
            start_time: Orario esplicito (solo manager/admin)

        Returns:
            uuid.UUID: ID della nuova assignment

        Raises:
            ValidationError: lettura negativa o gestore diverso da quello del turno
            NotFoundError: turno o erogatore inesistente
            InvalidStateError: turno non aperto
            ConflictError: l'erogatore ha già un'assegnazione aperta
            AuthorizationError: operatore non abilitato
        """
        verify_backdate(actor, start_time)

        opening = to_volume(opening_balance)
        if opening < 0:
            raise ValidationError("La lettura di apertura non può essere negativa")

        shift = await self.shifts.get(shift_id)
        if not shift:
            raise NotFoundError(f"Turno {shift_id} non trovato")
        if not shift.is_open:
            raise InvalidStateError("Non è possibile aggiungere erogatori a un turno chiuso")
        if shift.worker_id != worker_id:
            raise ValidationError("Il gestore dell'assegnazione deve coincidere con quello del turno")
        verify_can_modify_shift(actor, shift.worker_id, shift.is_open)

        # Lock per erogatore: serializza il controllo "nessuna assegnazione aperta"
        nozzle = await self.nozzles.get_for_update(nozzle_id)
        if not nozzle:
            raise NotFoundError(f"Erogatore {nozzle_id} non trovato")

        existing = await self.assignments.find_open_by_nozzle(nozzle_id)
        if existing is not None:
            raise ConflictError(
                f"L'erogatore {nozzle.name} ha già un'assegnazione aperta",
                extra={"assignment_id": str(existing.id)},
            )

        tz = self.settings.station_timezone
        start = to_station_time(start_time, tz) if start_time else station_now(tz)

        current = to_volume(nozzle.current_reading)
        if abs(opening - current) > self.settings.opening_reading_tolerance:
            logger.warning(
                "Lettura di apertura %s diversa dal contatore dell'erogatore %s (%s)",
                opening, nozzle.name, current,
            )

        assignment = NozzleAssignment(
            id=uuid.uuid4(),
            nozzle_id=nozzle_id,
            worker_id=worker_id,
            shift_id=shift_id,
            start_time=start,
            opening_balance=opening,
            status=AssignmentStatus.OPEN,
            entry_by=actor.username,
        )
        await self.assignments.add(assignment)

        logger.info(
            "Aperta assegnazione %s: erogatore %s al gestore %s (turno %s)",
            assignment.id, nozzle.name, worker_id, shift_id,
        )
        return assignment.id

    async def close_assignment(
        self,
        actor: Actor,
        assignment_id: uuid.UUID,
        closing_balance: Decimal,
        resolve_unit_price: Optional[UnitPriceResolver] = None,
        end_time: Optional[datetime] = None,
    ) -> AssignmentSummary:
        """
        Chiude un'assegnazione e ne congela erogato e incasso.

        Args:
            resolve_unit_price: Risolutore del prezzo (default: storico prezzi)

        Returns:
            AssignmentSummary: valori catturati alla chiusura

        Raises:
            NotFoundError: assegnazione (o prezzo) inesistente
            InvalidStateError: assegnazione già chiusa, o test mancante se richiesto
            ValidationError: lettura di chiusura < apertura, fine < inizio,
                erogato inferiore al carburante di test
        """
        verify_backdate(actor, end_time)
        closing = to_volume(closing_balance)
        resolver = resolve_unit_price or self.prices.resolve_unit_price

        assignment = await self.assignments.get(assignment_id)
        if not assignment:
            raise NotFoundError(f"Assegnazione {assignment_id} non trovata")

        # Lock sull'erogatore, poi rilettura dell'assegnazione
        nozzle = await self.nozzles.get_for_update(assignment.nozzle_id)
        if not nozzle:
            raise NotFoundError(f"Erogatore {assignment.nozzle_id} non trovato")
        assignment = await self.assignments.get_for_update(assignment_id)
        if not assignment:
            raise NotFoundError(f"Assegnazione {assignment_id} non trovata")

        if assignment.is_closed:
            raise InvalidStateError(
                "L'assegnazione è già chiusa",
                extra={"assignment_id": str(assignment_id)},
            )

        shift = await self.shifts.get(assignment.shift_id)
        if not shift:
            raise NotFoundError(f"Turno {assignment.shift_id} non trovato")
        verify_can_modify_shift(actor, shift.worker_id, shift.is_open)

        opening = to_volume(assignment.opening_balance)
        if closing < opening:
            raise ValidationError(
                f"La lettura di chiusura ({closing}) non può essere inferiore "
                f"a quella di apertura ({opening})"
            )

        tz = self.settings.station_timezone
        end = to_station_time(end_time, tz) if end_time else station_now(tz)
        if end < assignment.start_time:
            raise ValidationError("L'orario di fine non può precedere l'orario di inizio")

        if self.settings.require_nozzle_test_before_close:
            if not await self.tests.exists_for_assignment(assignment_id):
                raise InvalidStateError(
                    "È richiesto un test dell'erogatore prima della chiusura"
                )

        # Prezzo risolto una sola volta, prima di ogni modifica
        unit_price = to_money(await resolver(nozzle.product_id, end))
        if unit_price < 0:
            raise ValidationError(f"Prezzo unitario negativo per il prodotto {nozzle.product_id}")

        dispensed = to_volume(closing - opening)
        tested = to_volume(await self.tests.sum_for_assignment(assignment_id))
        if dispensed < tested:
            raise ValidationError(
                f"Volume erogato ({dispensed}) inferiore al carburante di test "
                f"registrato ({tested})",
                extra={"assignment_id": str(assignment_id)},
            )

        total = compute_total_amount(dispensed, unit_price)

        assignment.closing_balance = closing
        assignment.end_time = end
        assignment.status = AssignmentStatus.CLOSED
        assignment.dispensed_amount = dispensed
        assignment.total_amount = total
        assignment.unit_price = unit_price

        nozzle.previous_reading = nozzle.current_reading
        nozzle.current_reading = closing

        await self.assignments.save(assignment)

        logger.info(
            "Chiusa assegnazione %s: erogati %s a %s = %s",
            assignment_id, dispensed, unit_price, total,
        )

        return AssignmentSummary(
            assignment_id=assignment.id,
            nozzle_id=assignment.nozzle_id,
            worker_id=assignment.worker_id,
            shift_id=assignment.shift_id,
            start_time=assignment.start_time,
            end_time=end,
            opening_balance=opening,
            closing_balance=closing,
            dispensed_amount=dispensed,
            unit_price=unit_price,
            total_amount=total,
        )

    async def get_assignment(self, assignment_id: uuid.UUID) -> NozzleAssignment:
        assignment = await self.assignments.get(assignment_id)
        if not assignment:
            raise NotFoundError(f"Assegnazione {assignment_id} non trovata")
        return assignment

    async def list_for_shift(self, shift_id: uuid.UUID) -> Sequence[NozzleAssignment]:
        return await self.assignments.list_for_shift(shift_id)
