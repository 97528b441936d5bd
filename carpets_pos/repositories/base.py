# ==============================================================================
# REPOSITORIO BASE - Acceso a MySQL mediante SQLAlchemy Core
# ==============================================================================
# Cada operación abre su conexión, ejecuta y la libera (context managers),
# así un fallo parcial nunca deja conexiones colgadas.
#
# Para agrupar varias sentencias en UNA transacción, el servicio abre
# `repo.transaction()` y pasa la conexión a cada método (`conn=...`).
# ==============================================================================

import logging
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine, Row
from sqlalchemy.exc import SQLAlchemyError

from carpets_pos.errors import PersistenceError

logger = logging.getLogger(__name__)


class SqlRepository:
    """
    Clase base para todos los repositorios SQL.

    El Engine se inyecta (no hay conexión global del proceso). Los métodos
    públicos de las subclases aceptan una conexión opcional: si no se pasa,
    la operación corre en su propia transacción corta.
    """

    def __init__(self, engine: Engine):
        """
        Inicializa el repositorio.

        Args:
            engine: Engine de SQLAlchemy (pool de conexiones)
        """
        self.engine = engine

    def _persistence_error(self, exc: SQLAlchemyError) -> PersistenceError:
        logger.error("Error de base de datos en %s: %s", type(self).__name__, exc, exc_info=True)
        return PersistenceError(f"Error de base de datos: {exc.__class__.__name__}")

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """
        Abre una transacción: commit al salir, rollback ante cualquier error.

        Yields:
            Conexión dentro de la transacción

        Raises:
            PersistenceError: Si falla la base de datos
        """
        try:
            with self.engine.begin() as conn:
                yield conn
        except SQLAlchemyError as exc:
            raise self._persistence_error(exc) from exc

    @contextmanager
    def _scope(self, conn: Optional[Connection] = None) -> Iterator[Connection]:
        """Usa la conexión recibida o abre una transacción propia."""
        if conn is None:
            with self.transaction() as own:
                yield own
            return
        try:
            yield conn
        except SQLAlchemyError as exc:
            raise self._persistence_error(exc) from exc

    def _fetch_one(self, stmt: Any, conn: Optional[Connection] = None) -> Optional[Row]:
        with self._scope(conn) as c:
            return c.execute(stmt).first()

    def _fetch_all(self, stmt: Any, conn: Optional[Connection] = None) -> List[Row]:
        with self._scope(conn) as c:
            return list(c.execute(stmt).all())

    def _scalar(self, stmt: Any, conn: Optional[Connection] = None) -> Any:
        with self._scope(conn) as c:
            return c.execute(stmt).scalar()

    def _execute(self, stmt: Any, conn: Optional[Connection] = None) -> int:
        """Ejecuta una sentencia de escritura y retorna las filas afectadas."""
        with self._scope(conn) as c:
            return c.execute(stmt).rowcount

    def _insert(self, stmt: Any, conn: Optional[Connection] = None) -> int:
        """Ejecuta un INSERT y retorna la clave generada."""
        with self._scope(conn) as c:
            result = c.execute(stmt)
            return int(result.inserted_primary_key[0])

    def ping(self) -> bool:
        """Verifica que la base responda (SELECT 1)."""
        with self._scope() as c:
            return c.execute(text('SELECT 1')).scalar() == 1
