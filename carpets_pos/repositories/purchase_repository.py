# ==============================================================================
# REPOSITORIO DE COMPRAS
# ==============================================================================
# Tablas compra (cabecera) y detalle_compra (líneas).
# ==============================================================================

import logging
from typing import Dict, List, Optional

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.engine import Connection

from carpets_pos.models import Purchase, PurchaseLine
from carpets_pos.repositories.base import SqlRepository
from carpets_pos.repositories.schema import compra, detalle_compra

logger = logging.getLogger(__name__)


class PurchaseRepository(SqlRepository):
    """Repositorio para gestión de compras a proveedores."""

    # =========================================================================
    # CABECERAS
    # =========================================================================

    def create(self, purchase: Purchase, conn: Optional[Connection] = None) -> int:
        """
        Inserta cabecera y líneas de una compra.

        Returns:
            ID generado de la compra
        """
        with self._scope(conn) as c:
            purchase_id = self._insert(insert(compra).values(**purchase.to_row()), c)
            purchase.id = purchase_id
            for line in purchase.lines:
                line.compra_id = purchase_id
                line.id = self._insert(
                    insert(detalle_compra).values(
                        idcompra=purchase_id,
                        idproducto=line.producto_id,
                        unidades=line.unidades,
                        precio_unitario=line.precio_unitario,
                    ),
                    c,
                )
        logger.info("Compra %s registrada con %d líneas", purchase_id, len(purchase.lines))
        return purchase_id

    def delete(self, purchase_id: int, conn: Optional[Connection] = None) -> bool:
        """Elimina la compra y sus líneas en la misma transacción."""
        with self._scope(conn) as c:
            self._execute(delete(detalle_compra).where(detalle_compra.c.idcompra == purchase_id), c)
            rows = self._execute(delete(compra).where(compra.c.idcompra == purchase_id), c)
        return rows > 0

    def recalculate_total(self, purchase_id: int, conn: Optional[Connection] = None) -> float:
        """
        Recalcula `compra.monto` como la suma de sus líneas.

        Returns:
            Nuevo monto
        """
        with self._scope(conn) as c:
            total = self._scalar(
                select(func.sum(detalle_compra.c.unidades * detalle_compra.c.precio_unitario))
                .where(detalle_compra.c.idcompra == purchase_id),
                c,
            )
            monto = round(float(total or 0.0), 2)
            self._execute(
                update(compra).where(compra.c.idcompra == purchase_id).values(monto=monto), c
            )
        return monto

    def find_by_id(self, purchase_id: int, conn: Optional[Connection] = None) -> Optional[Purchase]:
        with self._scope(conn) as c:
            row = self._fetch_one(select(compra).where(compra.c.idcompra == purchase_id), c)
            if row is None:
                return None
            purchase = Purchase.from_row(row._mapping)
            purchase.lines = self.find_lines(purchase_id, c)
        return purchase

    def find_all(self, conn: Optional[Connection] = None) -> List[Purchase]:
        """Todas las compras (más recientes primero) con sus líneas."""
        with self._scope(conn) as c:
            purchases = [
                Purchase.from_row(r._mapping)
                for r in self._fetch_all(select(compra).order_by(compra.c.idcompra.desc()), c)
            ]
            grouped: Dict[int, List[PurchaseLine]] = {}
            if purchases:
                rows = self._fetch_all(
                    select(detalle_compra)
                    .where(detalle_compra.c.idcompra.in_([p.id for p in purchases]))
                    .order_by(detalle_compra.c.iddetalle),
                    c,
                )
                for r in rows:
                    line = PurchaseLine.from_row(r._mapping)
                    grouped.setdefault(line.compra_id, []).append(line)
        for purchase in purchases:
            purchase.lines = grouped.get(purchase.id, [])
        return purchases

    # =========================================================================
    # LÍNEAS
    # =========================================================================

    def find_lines(self, purchase_id: int, conn: Optional[Connection] = None) -> List[PurchaseLine]:
        rows = self._fetch_all(
            select(detalle_compra)
            .where(detalle_compra.c.idcompra == purchase_id)
            .order_by(detalle_compra.c.iddetalle),
            conn,
        )
        return [PurchaseLine.from_row(r._mapping) for r in rows]

    def find_line(self, line_id: int, conn: Optional[Connection] = None) -> Optional[PurchaseLine]:
        row = self._fetch_one(select(detalle_compra).where(detalle_compra.c.iddetalle == line_id), conn)
        return PurchaseLine.from_row(row._mapping) if row is not None else None

    def update_line(
        self,
        line_id: int,
        unidades: int,
        precio_unitario: float,
        conn: Optional[Connection] = None
    ) -> bool:
        rows = self._execute(
            update(detalle_compra)
            .where(detalle_compra.c.iddetalle == line_id)
            .values(unidades=unidades, precio_unitario=precio_unitario),
            conn,
        )
        return rows > 0

    def delete_line(self, line_id: int, conn: Optional[Connection] = None) -> bool:
        rows = self._execute(delete(detalle_compra).where(detalle_compra.c.iddetalle == line_id), conn)
        return rows > 0
