# ==============================================================================
# REPOSITORIO DE CATEGORÍAS
# ==============================================================================
# Tabla categoria: {idcategoria, nombre}
# ==============================================================================

import logging
from typing import List, Optional

from sqlalchemy import func, insert, select
from sqlalchemy.engine import Connection
from sqlalchemy.exc import IntegrityError

from carpets_pos.models import Category
from carpets_pos.repositories.base import SqlRepository
from carpets_pos.repositories.schema import categoria

logger = logging.getLogger(__name__)


class CategoryRepository(SqlRepository):
    """Repositorio para la tabla categoria."""

    def find_by_name(self, nombre: str, conn: Optional[Connection] = None) -> Optional[Category]:
        row = self._fetch_one(
            select(categoria).where(categoria.c.nombre == nombre), conn
        )
        if row is None:
            return None
        return Category(id=row.idcategoria, nombre=row.nombre)

    def exists(self, nombre: str, conn: Optional[Connection] = None) -> bool:
        count = self._scalar(
            select(func.count()).select_from(categoria).where(categoria.c.nombre == nombre),
            conn,
        )
        return bool(count)

    def ensure(self, nombre: str, conn: Optional[Connection] = None) -> bool:
        """
        Asegura que la categoría exista (verifica y, si falta, inserta).

        Es idempotente: repetir con el mismo nombre no crea filas nuevas.
        El INSERT corre en un savepoint; si otra operación creó la misma
        categoría en paralelo, se reutiliza la existente.

        Args:
            nombre: Nombre de la categoría (ya normalizado)
            conn: Conexión de la transacción en curso (opcional)

        Returns:
            True si se creó, False si ya existía
        """
        with self._scope(conn) as c:
            if self.exists(nombre, c):
                return False
            try:
                with c.begin_nested():
                    c.execute(insert(categoria).values(nombre=nombre))
            except IntegrityError:
                if self.find_by_name(nombre, c) is None:
                    raise
                logger.info("Categoría %s creada por otra operación", nombre)
                return False
            logger.info("Categoría creada: %s", nombre)
            return True

    def find_all(self, conn: Optional[Connection] = None) -> List[Category]:
        rows = self._fetch_all(select(categoria).order_by(categoria.c.nombre), conn)
        return [Category(id=r.idcategoria, nombre=r.nombre) for r in rows]
