# ==============================================================================
# REPOSITORIO DE USUARIOS
# ==============================================================================
# Encapsula todo el acceso a la tabla usuario: {idusuario, nombre, password, rol}
# ==============================================================================

from typing import List, Optional

from sqlalchemy import func, insert, select, update
from sqlalchemy.engine import Connection

from carpets_pos.models import User
from carpets_pos.repositories.base import SqlRepository
from carpets_pos.repositories.schema import usuario


class UserRepository(SqlRepository):
    """
    Repositorio para gestión de usuarios.

    NOTA: La validación de credenciales se hace SOLO en UserService
    usando check_password_hash. El repositorio solo maneja persistencia.
    """

    def find_by_username(self, nombre: str, conn: Optional[Connection] = None) -> Optional[User]:
        """
        Obtiene un usuario por su nombre.

        Args:
            nombre: Nombre de usuario

        Returns:
            Usuario o None
        """
        row = self._fetch_one(select(usuario).where(usuario.c.nombre == nombre), conn)
        return User.from_row(row._mapping) if row is not None else None

    def user_exists(self, nombre: str, conn: Optional[Connection] = None) -> bool:
        count = self._scalar(
            select(func.count()).select_from(usuario).where(usuario.c.nombre == nombre), conn
        )
        return bool(count)

    def create(self, user: User, conn: Optional[Connection] = None) -> int:
        """
        Crea un nuevo usuario.

        Returns:
            ID generado
        """
        user.id = self._insert(insert(usuario).values(**user.to_row()), conn)
        return user.id

    def update_password(self, nombre: str, password_hash: str, conn: Optional[Connection] = None) -> bool:
        """
        Cambia la contraseña de un usuario.

        Returns:
            True si se actualizó
        """
        rows = self._execute(
            update(usuario).where(usuario.c.nombre == nombre).values(password=password_hash), conn
        )
        return rows > 0

    def find_all(self, conn: Optional[Connection] = None) -> List[User]:
        rows = self._fetch_all(select(usuario).order_by(usuario.c.idusuario), conn)
        return [User.from_row(r._mapping) for r in rows]
