"""
Repository Prezzi prodotto
Progetto: Fuel Station Manager (Gestionale Distributore)
"""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select

from app.core.exceptions import NotFoundError
from app.models.product_price import ProductPrice
from app.repositories.base import SQLAlchemyRepository


class ProductPriceRepository(SQLAlchemyRepository[ProductPrice]):
    model = ProductPrice

    async def resolve_unit_price(self, product_id: uuid.UUID, at: datetime) -> Decimal:
        """
        Prezzo unitario valido per il prodotto all'istante indicato.

        Raises:
            NotFoundError: Se non esiste un prezzo in vigore
        """
        stmt = (
            select(ProductPrice.unit_price)
            .where(
                ProductPrice.product_id == product_id,
                ProductPrice.effective_from <= at,
            )
            .order_by(ProductPrice.effective_from.desc())
            .limit(1)
        )
        result = await self.db.execute(stmt)
        price = result.scalar_one_or_none()
        if price is None:
            raise NotFoundError(f"Nessun prezzo in vigore per il prodotto {product_id} al {at}")
        return price
