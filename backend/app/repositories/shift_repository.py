"""
Repository Turni, movimenti di turno e Contabilità
Progetto: Fuel Station Manager (Gestionale Distributore)
"""

import uuid
from typing import Optional, Sequence

from sqlalchemy import select

from app.models.shift import CreditBill, Shift, ShiftExpense, ShiftPayment
from app.models.shift_accounting import ShiftAccounting
from app.repositories.base import SQLAlchemyRepository
from app.schemas.enums import ShiftStatus


class ShiftRepository(SQLAlchemyRepository[Shift]):
    model = Shift

    async def find_open_for_worker(self, worker_id: uuid.UUID) -> Optional[Shift]:
        stmt = (
            select(Shift)
            .where(Shift.worker_id == worker_id, Shift.status == ShiftStatus.OPEN)
            .limit(1)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()


class ShiftTransactionRepository(SQLAlchemyRepository[CreditBill]):
    """Buoni a credito, incassi e spese collegati a un turno."""

    model = CreditBill

    async def list_credit_bills(self, shift_id: uuid.UUID) -> Sequence[CreditBill]:
        stmt = (
            select(CreditBill)
            .where(CreditBill.shift_id == shift_id)
            .order_by(CreditBill.bill_date, CreditBill.id)
        )
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def list_payments(self, shift_id: uuid.UUID) -> Sequence[ShiftPayment]:
        stmt = (
            select(ShiftPayment)
            .where(ShiftPayment.shift_id == shift_id)
            .order_by(ShiftPayment.payment_date, ShiftPayment.id)
        )
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def list_expenses(self, shift_id: uuid.UUID) -> Sequence[ShiftExpense]:
        stmt = (
            select(ShiftExpense)
            .where(ShiftExpense.shift_id == shift_id)
            .order_by(ShiftExpense.expense_date, ShiftExpense.id)
        )
        result = await self.db.execute(stmt)
        return result.scalars().all()


class ShiftAccountingRepository(SQLAlchemyRepository[ShiftAccounting]):
    model = ShiftAccounting
    conflict_detail = "La contabilità di questo turno esiste già"

    async def get_by_shift(self, shift_id: uuid.UUID) -> Optional[ShiftAccounting]:
        stmt = select(ShiftAccounting).where(ShiftAccounting.shift_id == shift_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()
