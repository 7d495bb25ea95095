from __future__ import annotations

from typing import Optional

from sqlalchemy import select, update

from ..errors import InvariantError, NotFoundError
from ..models import Product, StockMovement
from ..time_utils import utcnow
from .base import SQLAlchemyRepository


class ProductRepository(SQLAlchemyRepository):
    def __init__(self, session_factory):
        super().__init__(Product, session_factory, label="Product")

    def low_stock(self, threshold: int) -> list:
        return self.all_where(Product.stock_qty <= threshold)

    def movements(self, product_id: int) -> list:
        stmt = (
            select(StockMovement)
            .where(StockMovement.product_id == product_id)
            .order_by(StockMovement.id.asc())
        )
        return self._run(lambda: list(self.session.execute(stmt).scalars()))

    def adjust_stock(
        self,
        product_id: int,
        delta: int,
        *,
        reason: str = "adjustment",
        note: Optional[str] = None,
        transaction_id: Optional[int] = None,
    ) -> StockMovement:
        """
        Apply a signed stock delta with a single conditional UPDATE.

        The row only changes when stock_qty + delta stays >= 0, so concurrent
        callers never read-modify-write: the database serializes the UPDATEs and
        each one re-evaluates the condition against the committed quantity.
        A ledger row is added in the same transaction. Flushes, never commits.
        """
        table = Product.__table__
        stmt = (
            update(table)
            .where(table.c.id == product_id)
            .where(table.c.stock_qty + delta >= 0)
            .values(stock_qty=table.c.stock_qty + delta, updated_at=utcnow())
        )
        result = self._run(lambda: self.session.execute(stmt))

        if result.rowcount == 0:
            current = self._run(
                lambda: self.session.execute(select(table.c.stock_qty).where(table.c.id == product_id)).scalar()
            )
            if current is None:
                raise NotFoundError(f"product {product_id} does not exist")
            raise InvariantError(
                f"insufficient stock for product {product_id}: have {current}, change {delta}"
            )

        stock_after = self._run(
            lambda: self.session.execute(select(table.c.stock_qty).where(table.c.id == product_id)).scalar_one()
        )
        movement = StockMovement(
            product_id=product_id,
            delta=delta,
            stock_after=stock_after,
            reason=reason,
            note=note,
            transaction_id=transaction_id,
        )
        self.session.add(movement)
        self._flush({})

        # ORM copies loaded before the UPDATE are stale now
        cached = self.session.identity_map.get(self.session.identity_key(Product, product_id))
        if cached is not None:
            self.session.expire(cached)
        return movement
