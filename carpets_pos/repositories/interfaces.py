# ==============================================================================
# INTERFACES DE REPOSITORIOS
# ==============================================================================
#
# Contratos (protocolos) que los servicios esperan de la capa de datos.
# Permiten:
#
# 1. INDEPENDENCIA DE ALMACENAMIENTO
#    - Los servicios dependen de estas interfaces, NO de SQLAlchemy
#
# 2. TESTING
#    - Fácil crear dobles de prueba que las implementen
#
# Todos los métodos aceptan `conn` opcional para participar en la
# transacción abierta por el servicio (ver SqlRepository.transaction).
# ==============================================================================

from contextlib import AbstractContextManager
from datetime import date
from typing import Any, List, Optional, Protocol, runtime_checkable

from carpets_pos.models import Product, Purchase, PurchaseLine, Sale, SaleLine, User


@runtime_checkable
class ITransactional(Protocol):
    """Repositorio capaz de abrir una transacción."""

    def transaction(self) -> AbstractContextManager:
        """Abre una transacción (commit/rollback automático)."""
        ...


@runtime_checkable
class IProductRepository(ITransactional, Protocol):

    def create(self, product: Product, conn: Any = None) -> int:
        """Inserta (asegurando la categoría) y retorna el ID."""
        ...

    def update(self, product: Product, conn: Any = None) -> bool:
        ...

    def delete(self, product_id: int, conn: Any = None) -> bool:
        ...

    def adjust_stock(self, product_id: int, delta: int, conn: Any = None) -> bool:
        """Suma delta al stock sin dejarlo negativo."""
        ...

    def find_by_id(self, product_id: int, conn: Any = None) -> Optional[Product]:
        ...

    def find_all(self, conn: Any = None) -> List[Product]:
        ...

    def find_by_ids(self, product_ids: List[int], conn: Any = None) -> List[Product]:
        ...

    def find_by_category(self, categoria_nombre: str, conn: Any = None) -> List[Product]:
        ...

    def find_by_name(self, nombre: str, conn: Any = None) -> List[Product]:
        ...

    def exists(self, product_id: int, conn: Any = None) -> bool:
        ...

    def get_ganancia_total(self, conn: Any = None) -> float:
        ...


@runtime_checkable
class ISaleRepository(ITransactional, Protocol):

    def create(self, sale: Sale, conn: Any = None) -> int:
        """Inserta cabecera + líneas y retorna el ID."""
        ...

    def delete(self, sale_id: int, conn: Any = None) -> bool:
        ...

    def find_by_id(self, sale_id: int, conn: Any = None) -> Optional[Sale]:
        ...

    def find_all(self, conn: Any = None) -> List[Sale]:
        ...

    def find_by_day(self, dia: date, conn: Any = None) -> List[Sale]:
        ...

    def find_lines(self, sale_id: int, conn: Any = None) -> List[SaleLine]:
        ...


@runtime_checkable
class IPurchaseRepository(ITransactional, Protocol):

    def create(self, purchase: Purchase, conn: Any = None) -> int:
        ...

    def delete(self, purchase_id: int, conn: Any = None) -> bool:
        ...

    def recalculate_total(self, purchase_id: int, conn: Any = None) -> float:
        ...

    def find_by_id(self, purchase_id: int, conn: Any = None) -> Optional[Purchase]:
        ...

    def find_all(self, conn: Any = None) -> List[Purchase]:
        ...

    def find_line(self, line_id: int, conn: Any = None) -> Optional[PurchaseLine]:
        ...

    def update_line(self, line_id: int, unidades: int, precio_unitario: float, conn: Any = None) -> bool:
        ...

    def delete_line(self, line_id: int, conn: Any = None) -> bool:
        ...


@runtime_checkable
class IUserRepository(Protocol):

    def find_by_username(self, nombre: str, conn: Any = None) -> Optional[User]:
        ...

    def user_exists(self, nombre: str, conn: Any = None) -> bool:
        ...

    def create(self, user: User, conn: Any = None) -> int:
        ...

    def update_password(self, nombre: str, password_hash: str, conn: Any = None) -> bool:
        ...

    def find_all(self, conn: Any = None) -> List[User]:
        ...
