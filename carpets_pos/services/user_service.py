# ==============================================================================
# SERVICIO DE USUARIOS
# ==============================================================================
# Centraliza toda la lógica de negocio relacionada con usuarios.
#
# - Este servicio NO conoce SQL: solo habla con IUserRepository
# - Las contraseñas se guardan como hash werkzeug
# - Las contraseñas en texto plano heredadas se aceptan hasta que
#   migrar_passwords() las reescribe como hash
#
# No existe clave maestra ni ningún otro atajo de acceso.
# ==============================================================================

import hmac
import logging
from typing import List, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from carpets_pos.errors import ValidationError
from carpets_pos.models import User, UserRole
from carpets_pos.repositories.interfaces import IUserRepository

logger = logging.getLogger(__name__)

# Prefijos de los métodos de hash de werkzeug
HASH_PREFIXES = ('pbkdf2:', 'scrypt:')


def is_password_hash(value: str) -> bool:
    """Indica si el valor almacenado ya es un hash werkzeug."""
    return bool(value) and value.startswith(HASH_PREFIXES)


class UserService:
    """
    Servicio para gestión de usuarios.

    Responsabilidades:
    - Autenticación (login)
    - Alta de usuarios con contraseña hasheada
    - Migración de contraseñas heredadas en texto plano
    """

    ROLE_ADMIN = UserRole.ADMIN.value
    ROLE_VENDEDOR = UserRole.VENDEDOR.value

    VALID_ROLES = frozenset([ROLE_ADMIN, ROLE_VENDEDOR])

    def __init__(self, user_repo: IUserRepository):
        """
        Inicializa el servicio de usuarios.

        Args:
            user_repo: Repositorio de usuarios
        """
        self.user_repo = user_repo

    # =========================================================================
    # AUTENTICACIÓN
    # =========================================================================

    def verify_password(self, stored: str, password: str) -> bool:
        """
        Compara una contraseña contra el valor almacenado.

        Args:
            stored: Hash werkzeug o texto plano heredado
            password: Contraseña recibida

        Returns:
            True si coincide
        """
        if not stored:
            return False
        if is_password_hash(stored):
            return check_password_hash(stored, password)
        # Texto plano heredado
        return hmac.compare_digest(stored.encode('utf-8'), password.encode('utf-8'))

    def authenticate(self, nombre: str, password: str) -> Optional[User]:
        """
        Autentica un usuario.

        Args:
            nombre: Nombre de usuario (DNI)
            password: Contraseña en texto plano

        Returns:
            Usuario si las credenciales son válidas, None si no
        """
        if not nombre or password is None:
            return None

        user = self.user_repo.find_by_username(nombre)
        if user is None:
            logger.info("Intento de login con usuario inexistente: %s", nombre)
            return None

        if not self.verify_password(user.password_hash, password):
            logger.info("Contraseña incorrecta para %s", nombre)
            return None

        logger.info("Login exitoso: %s (%s)", user.nombre, user.rol)
        return user

    # =========================================================================
    # ALTA Y MANTENIMIENTO
    # =========================================================================

    def normalize_role(self, rol: Optional[str]) -> str:
        """Lleva el rol a uno de los valores válidos (vendedor por defecto)."""
        value = (rol or '').strip().lower()
        if value in ('admin', 'administrador'):
            return self.ROLE_ADMIN
        return self.ROLE_VENDEDOR

    def crear_usuario(self, nombre: str, password: str, rol: str = None) -> User:
        """
        Crea un usuario con la contraseña hasheada.

        Args:
            nombre: Nombre de usuario
            password: Contraseña en texto plano
            rol: Rol deseado (se normaliza)

        Returns:
            Usuario creado (con id)

        Raises:
            ValidationError: Datos vacíos o usuario duplicado
        """
        nombre = (nombre or '').strip()
        if not nombre:
            raise ValidationError("El nombre de usuario es obligatorio")
        if not password:
            raise ValidationError("La contraseña es obligatoria")
        if self.user_repo.user_exists(nombre):
            raise ValidationError(f"El usuario {nombre} ya existe")

        user = User(
            nombre=nombre,
            password_hash=generate_password_hash(password),
            rol=self.normalize_role(rol),
        )
        self.user_repo.create(user)
        logger.info("Usuario creado: %s (%s)", user.nombre, user.rol)
        return user

    def migrar_passwords(self) -> int:
        """
        Reescribe como hash las contraseñas guardadas en texto plano.

        Returns:
            Cantidad de usuarios migrados
        """
        migrados = 0
        for user in self.user_repo.find_all():
            if not user.password_hash or is_password_hash(user.password_hash):
                continue
            self.user_repo.update_password(user.nombre, generate_password_hash(user.password_hash))
            migrados += 1
        if migrados:
            logger.info("Contraseñas migradas a hash: %d", migrados)
        return migrados

    def list_users(self) -> List[User]:
        return self.user_repo.find_all()
