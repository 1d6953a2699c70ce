"""
Repository Erogatori, Assegnazioni e Test
Progetto: Fuel Station Manager (Gestionale Distributore)
"""

import uuid
from decimal import Decimal
from typing import Optional, Sequence

from sqlalchemy import func, select

from app.models.nozzle import Nozzle, NozzleAssignment, NozzleTest
from app.repositories.base import SQLAlchemyRepository
from app.schemas.enums import AssignmentStatus


class NozzleRepository(SQLAlchemyRepository[Nozzle]):
    model = Nozzle


class NozzleAssignmentRepository(SQLAlchemyRepository[NozzleAssignment]):
    """
    Accesso alle assegnazioni erogatore.

    Il vincolo uq_nozzle_assignments_open_nozzle garantisce al più
    un'assegnazione OPEN per erogatore anche in caso di corsa.
    """

    model = NozzleAssignment
    conflict_detail = "L'erogatore ha già un'assegnazione aperta"

    async def find_open_by_nozzle(self, nozzle_id: uuid.UUID) -> Optional[NozzleAssignment]:
        stmt = select(NozzleAssignment).where(
            NozzleAssignment.nozzle_id == nozzle_id,
            NozzleAssignment.status == AssignmentStatus.OPEN,
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_shift(self, shift_id: uuid.UUID) -> Sequence[NozzleAssignment]:
        stmt = (
            select(NozzleAssignment)
            .where(NozzleAssignment.shift_id == shift_id)
            .order_by(NozzleAssignment.start_time, NozzleAssignment.id)
        )
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def list_closed_for_shift(self, shift_id: uuid.UUID) -> Sequence[NozzleAssignment]:
        stmt = (
            select(NozzleAssignment)
            .where(
                NozzleAssignment.shift_id == shift_id,
                NozzleAssignment.status == AssignmentStatus.CLOSED,
            )
            .order_by(NozzleAssignment.start_time, NozzleAssignment.id)
        )
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def count_open_for_shift(self, shift_id: uuid.UUID) -> int:
        stmt = select(func.count(NozzleAssignment.id)).where(
            NozzleAssignment.shift_id == shift_id,
            NozzleAssignment.status == AssignmentStatus.OPEN,
        )
        result = await self.db.execute(stmt)
        return result.scalar() or 0


class NozzleTestRepository(SQLAlchemyRepository[NozzleTest]):
    model = NozzleTest

    async def list_for_shift(self, shift_id: uuid.UUID) -> Sequence[NozzleTest]:
        stmt = (
            select(NozzleTest)
            .where(NozzleTest.shift_id == shift_id)
            .order_by(NozzleTest.test_datetime, NozzleTest.id)
        )
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def exists_for_assignment(self, assignment_id: uuid.UUID) -> bool:
        stmt = select(func.count(NozzleTest.id)).where(NozzleTest.assignment_id == assignment_id)
        result = await self.db.execute(stmt)
        return (result.scalar() or 0) > 0

    async def sum_for_assignment(self, assignment_id: uuid.UUID) -> Decimal:
        """Volume totale dei test registrati sull'assegnazione."""
        stmt = select(
            func.coalesce(func.sum(NozzleTest.test_quantity), 0)
        ).where(NozzleTest.assignment_id == assignment_id)
        result = await self.db.execute(stmt)
        return Decimal(result.scalar_one())
