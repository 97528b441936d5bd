# ==============================================================================
# REPOSITORIO DE PRODUCTOS
# ==============================================================================
# Encapsula todo el acceso a la tabla producto.
# Columnas: idproducto, nombre, fecha_ingreso, precio_compra, precio_venta,
#           cantidad, categoria_nombre, image_path, precio_oferta
# ==============================================================================

import logging
from typing import List, Optional

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.engine import Connection

from carpets_pos.errors import ValidationError
from carpets_pos.models import Product
from carpets_pos.repositories.base import SqlRepository
from carpets_pos.repositories.category_repository import CategoryRepository
from carpets_pos.repositories.schema import detalle_venta, producto

logger = logging.getLogger(__name__)


class ProductRepository(SqlRepository):
    """
    Repositorio para gestión de productos.

    Operaciones: create, update, delete, find_by_id, find_all, más consultas
    por categoría, por nombre, y la ganancia agregada de todas las ventas.
    """

    def __init__(self, engine, category_repo: CategoryRepository = None):
        """
        Inicializa el repositorio de productos.

        Args:
            engine: Engine de SQLAlchemy
            category_repo: Repositorio de categorías (se crea si no se pasa)
        """
        super().__init__(engine)
        self.category_repo = category_repo or CategoryRepository(engine)

    # =========================================================================
    # ESCRITURA
    # =========================================================================

    def create(self, product: Product, conn: Optional[Connection] = None) -> int:
        """
        Inserta un producto, asegurando antes su categoría.

        Si la categoría es inválida o no se puede crear, el producto NO se
        inserta (ambas operaciones comparten la transacción).

        Args:
            product: Producto a insertar (product.id se completa)
            conn: Conexión de la transacción en curso (opcional)

        Returns:
            ID generado

        Raises:
            ValidationError: Si la categoría está vacía
            PersistenceError: Si falla la base de datos
        """
        categoria = (product.categoria_nombre or '').strip()
        if not categoria:
            raise ValidationError("Categoría inválida o vacía")

        product.categoria_nombre = categoria
        values = product.to_row()
        product.fecha_ingreso = values['fecha_ingreso']

        with self._scope(conn) as c:
            self.category_repo.ensure(categoria, c)
            product.id = self._insert(insert(producto).values(**values), c)

        logger.info("Producto %s creado: %s", product.id, product.nombre)
        return product.id

    def update(self, product: Product, conn: Optional[Connection] = None) -> bool:
        """
        Actualiza todas las columnas de un producto.
        Sin fecha_ingreso se conserva la fecha guardada.

        Returns:
            True si existía y se actualizó
        """
        categoria = (product.categoria_nombre or '').strip()
        if not categoria:
            raise ValidationError("Categoría inválida o vacía")

        values = product.to_row()
        if product.fecha_ingreso is None:
            del values['fecha_ingreso']

        with self._scope(conn) as c:
            self.category_repo.ensure(categoria, c)
            product.categoria_nombre = categoria
            rows = self._execute(
                update(producto)
                .where(producto.c.idproducto == product.id)
                .values(**values),
                c,
            )
        return rows > 0

    def delete(self, product_id: int, conn: Optional[Connection] = None) -> bool:
        """
        Elimina un producto.

        Las líneas de venta/compra históricas se conservan; al listarlas se
        muestra el marcador "Producto Eliminado".
        """
        rows = self._execute(delete(producto).where(producto.c.idproducto == product_id), conn)
        if rows:
            logger.info("Producto %s eliminado", product_id)
        return rows > 0

    def adjust_stock(self, product_id: int, delta: int, conn: Optional[Connection] = None) -> bool:
        """
        Suma `delta` (positivo o negativo) al stock en una sola sentencia.

        La condición `cantidad + delta >= 0` va en el WHERE: el stock nunca
        queda negativo aunque dos operaciones compitan.

        Returns:
            True si se aplicó, False si el producto no existe o el stock no alcanza
        """
        rows = self._execute(
            update(producto)
            .where(producto.c.idproducto == product_id)
            .where(producto.c.cantidad + delta >= 0)
            .values(cantidad=producto.c.cantidad + delta),
            conn,
        )
        return rows == 1

    # =========================================================================
    # LECTURA
    # =========================================================================

    def find_by_id(self, product_id: int, conn: Optional[Connection] = None) -> Optional[Product]:
        row = self._fetch_one(select(producto).where(producto.c.idproducto == product_id), conn)
        return Product.from_row(row._mapping) if row is not None else None

    def find_all(self, conn: Optional[Connection] = None) -> List[Product]:
        rows = self._fetch_all(select(producto).order_by(producto.c.idproducto), conn)
        return [Product.from_row(r._mapping) for r in rows]

    def find_by_ids(self, product_ids: List[int], conn: Optional[Connection] = None) -> List[Product]:
        """Busca varios productos a la vez (los inexistentes se omiten)."""
        if not product_ids:
            return []
        rows = self._fetch_all(
            select(producto).where(producto.c.idproducto.in_(sorted(set(product_ids)))), conn
        )
        return [Product.from_row(r._mapping) for r in rows]

    def find_by_category(self, categoria_nombre: str, conn: Optional[Connection] = None) -> List[Product]:
        rows = self._fetch_all(
            select(producto)
            .where(producto.c.categoria_nombre == categoria_nombre)
            .order_by(producto.c.idproducto),
            conn,
        )
        return [Product.from_row(r._mapping) for r in rows]

    def find_by_name(self, nombre: str, conn: Optional[Connection] = None) -> List[Product]:
        """Coincidencia parcial por nombre (LIKE %nombre%), con parámetro enlazado."""
        patron = f"%{nombre}%"
        rows = self._fetch_all(
            select(producto).where(producto.c.nombre.like(patron)).order_by(producto.c.idproducto),
            conn,
        )
        return [Product.from_row(r._mapping) for r in rows]

    def exists(self, product_id: int, conn: Optional[Connection] = None) -> bool:
        count = self._scalar(
            select(func.count()).select_from(producto).where(producto.c.idproducto == product_id),
            conn,
        )
        return bool(count)

    def get_ganancia_total(self, conn: Optional[Connection] = None) -> float:
        """
        Ganancia acumulada de todas las ventas registradas:
        SUM((detalle_venta.precio_unitario - producto.precio_compra) * detalle_venta.cantidad)

        Es un dato derivado; las líneas de productos eliminados no cuentan.

        Returns:
            Ganancia total (0.0 si no hay ventas)
        """
        stmt = (
            select(
                func.sum(
                    (detalle_venta.c.precio_unitario - producto.c.precio_compra)
                    * detalle_venta.c.cantidad
                )
            )
            .select_from(
                detalle_venta.join(producto, detalle_venta.c.idproducto == producto.c.idproducto)
            )
        )
        total = self._scalar(stmt, conn)
        return round(float(total or 0.0), 2)
