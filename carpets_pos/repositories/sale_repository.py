# ==============================================================================
# REPOSITORIO DE VENTAS
# ==============================================================================
# Tablas venta (cabecera) y detalle_venta (líneas).
# La cabecera y sus líneas se escriben SIEMPRE en la misma transacción.
# ==============================================================================

import logging
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional

from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import Connection

from carpets_pos.models import Sale, SaleLine
from carpets_pos.repositories.base import SqlRepository
from carpets_pos.repositories.schema import detalle_venta, venta

logger = logging.getLogger(__name__)


def numero_boleta_para(venta_id: int) -> str:
    """Formato del número de boleta a partir del ID de la venta."""
    return f"Venta #{venta_id}"


class SaleRepository(SqlRepository):
    """
    Repositorio para gestión de ventas.

    Una venta es una fila en `venta` más N filas en `detalle_venta`
    que apuntan a su `idventa`.
    """

    # =========================================================================
    # ESCRITURA
    # =========================================================================

    def create(self, sale: Sale, conn: Optional[Connection] = None) -> int:
        """
        Inserta cabecera y líneas de una venta.

        Dentro de la transacción: inserta la cabecera, asigna el número de
        boleta con el ID generado e inserta cada línea apuntando a ese ID.

        Args:
            sale: Venta con sus líneas (sale.id y numero_boleta se completan)
            conn: Conexión de la transacción en curso (opcional)

        Returns:
            ID generado de la venta
        """
        with self._scope(conn) as c:
            sale_id = self._insert(insert(venta).values(**sale.to_row()), c)
            sale.id = sale_id
            sale.numero_boleta = numero_boleta_para(sale_id)
            self._execute(
                update(venta)
                .where(venta.c.idventa == sale_id)
                .values(numero_boleta=sale.numero_boleta),
                c,
            )
            for line in sale.lines:
                line.venta_id = sale_id
                line.id = self._insert(
                    insert(detalle_venta).values(
                        idventa=sale_id,
                        idproducto=line.producto_id,
                        cantidad=line.cantidad,
                        precio_unitario=line.precio_unitario,
                    ),
                    c,
                )
        logger.info("Venta %s registrada con %d líneas", sale_id, len(sale.lines))
        return sale_id

    def delete(self, sale_id: int, conn: Optional[Connection] = None) -> bool:
        """
        Elimina una venta y sus líneas (explícitamente, misma transacción).

        Returns:
            True si la cabecera existía
        """
        with self._scope(conn) as c:
            self._execute(delete(detalle_venta).where(detalle_venta.c.idventa == sale_id), c)
            rows = self._execute(delete(venta).where(venta.c.idventa == sale_id), c)
        return rows > 0

    # =========================================================================
    # LECTURA
    # =========================================================================

    def find_by_id(self, sale_id: int, conn: Optional[Connection] = None) -> Optional[Sale]:
        """Obtiene una venta con sus líneas, o None."""
        with self._scope(conn) as c:
            row = self._fetch_one(select(venta).where(venta.c.idventa == sale_id), c)
            if row is None:
                return None
            sale = Sale.from_row(row._mapping)
            sale.lines = self.find_lines(sale_id, c)
        return sale

    def find_all(self, conn: Optional[Connection] = None) -> List[Sale]:
        """Todas las ventas (más recientes primero) con sus líneas."""
        return self._find_where(None, conn)

    def find_by_day(self, dia: date, conn: Optional[Connection] = None) -> List[Sale]:
        """Ventas cuya fecha cae en el día indicado."""
        inicio = datetime.combine(dia, time.min)
        fin = inicio + timedelta(days=1)
        return self._find_where((venta.c.fecha >= inicio) & (venta.c.fecha < fin), conn)

    def _find_where(self, condition, conn: Optional[Connection] = None) -> List[Sale]:
        stmt = select(venta).order_by(venta.c.idventa.desc())
        if condition is not None:
            stmt = stmt.where(condition)
        with self._scope(conn) as c:
            sales = [Sale.from_row(r._mapping) for r in self._fetch_all(stmt, c)]
            lines_by_sale = self._lines_for([s.id for s in sales], c)
        for sale in sales:
            sale.lines = lines_by_sale.get(sale.id, [])
        return sales

    def find_lines(self, sale_id: int, conn: Optional[Connection] = None) -> List[SaleLine]:
        rows = self._fetch_all(
            select(detalle_venta)
            .where(detalle_venta.c.idventa == sale_id)
            .order_by(detalle_venta.c.iddetalle),
            conn,
        )
        return [SaleLine.from_row(r._mapping) for r in rows]

    def _lines_for(self, sale_ids: List[int], conn: Connection) -> Dict[int, List[SaleLine]]:
        """Carga las líneas de varias ventas en una sola consulta."""
        if not sale_ids:
            return {}
        rows = self._fetch_all(
            select(detalle_venta)
            .where(detalle_venta.c.idventa.in_(sale_ids))
            .order_by(detalle_venta.c.iddetalle),
            conn,
        )
        grouped: Dict[int, List[SaleLine]] = {}
        for r in rows:
            line = SaleLine.from_row(r._mapping)
            grouped.setdefault(line.venta_id, []).append(line)
        return grouped
