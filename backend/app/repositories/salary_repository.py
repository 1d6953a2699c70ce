"""
Repository Stipendi calcolati e Pagamenti
Progetto: Fuel Station Manager (Gestionale Distributore)

Ordinamento stabile: data, poi creazione, poi id.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

from sqlalchemy import func, select

from app.models.salary import CalculatedSalary, SalaryPayment
from app.repositories.base import SQLAlchemyRepository


class CalculatedSalaryRepository(SQLAlchemyRepository[CalculatedSalary]):
    model = CalculatedSalary

    async def list_for_worker(
        self,
        worker_id: uuid.UUID,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
    ) -> Sequence[CalculatedSalary]:
        """Stipendi con calculation_date in [from_date, to_date] (estremi inclusi)."""
        stmt = select(CalculatedSalary).where(CalculatedSalary.worker_id == worker_id)
        if from_date is not None:
            stmt = stmt.where(CalculatedSalary.calculation_date >= from_date)
        if to_date is not None:
            stmt = stmt.where(CalculatedSalary.calculation_date <= to_date)
        stmt = stmt.order_by(
            CalculatedSalary.calculation_date,
            CalculatedSalary.created_at,
            CalculatedSalary.id,
        )
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def total_net_before(self, worker_id: uuid.UUID, before: date) -> Decimal:
        """Σ net_salary con calculation_date < before."""
        stmt = select(func.coalesce(func.sum(CalculatedSalary.net_salary), 0)).where(
            CalculatedSalary.worker_id == worker_id,
            CalculatedSalary.calculation_date < before,
        )
        result = await self.db.execute(stmt)
        return Decimal(result.scalar() or 0)


class SalaryPaymentRepository(SQLAlchemyRepository[SalaryPayment]):
    model = SalaryPayment

    async def list_for_worker(
        self,
        worker_id: uuid.UUID,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[SalaryPayment]:
        """Pagamenti con start <= payment_date < end."""
        stmt = select(SalaryPayment).where(SalaryPayment.worker_id == worker_id)
        if start is not None:
            stmt = stmt.where(SalaryPayment.payment_date >= start)
        if end is not None:
            stmt = stmt.where(SalaryPayment.payment_date < end)
        stmt = stmt.order_by(
            SalaryPayment.payment_date,
            SalaryPayment.created_at,
            SalaryPayment.id,
        )
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def total_before(self, worker_id: uuid.UUID, before: datetime) -> Decimal:
        """Σ amount con payment_date < before."""
        stmt = select(func.coalesce(func.sum(SalaryPayment.amount), 0)).where(
            SalaryPayment.worker_id == worker_id,
            SalaryPayment.payment_date < before,
        )
        result = await self.db.execute(stmt)
        return Decimal(result.scalar() or 0)
