# ==============================================================================
# CAPA DE REPOSITORIOS - Acceso a datos (MySQL vía SQLAlchemy Core)
# ==============================================================================
# ESTRUCTURA:
# ├── interfaces.py          → Protocolos (contratos que usan los servicios)
# ├── schema.py              → Tablas (nombres de columnas de producción)
# ├── base.py                → SqlRepository: conexión por operación, transacciones
# ├── category_repository.py → categoria
# ├── product_repository.py  → producto (+ ganancia agregada)
# ├── sale_repository.py     → venta + detalle_venta
# ├── purchase_repository.py → compra + detalle_compra
# └── user_repository.py     → usuario
# ==============================================================================

from carpets_pos.repositories.interfaces import (
    ITransactional,
    IProductRepository,
    ISaleRepository,
    IPurchaseRepository,
    IUserRepository,
)

from carpets_pos.repositories.schema import metadata, crear_esquema
from carpets_pos.repositories.base import SqlRepository
from carpets_pos.repositories.category_repository import CategoryRepository
from carpets_pos.repositories.product_repository import ProductRepository
from carpets_pos.repositories.sale_repository import SaleRepository
from carpets_pos.repositories.purchase_repository import PurchaseRepository
from carpets_pos.repositories.user_repository import UserRepository

__all__ = [
    # Interfaces
    'ITransactional',
    'IProductRepository',
    'ISaleRepository',
    'IPurchaseRepository',
    'IUserRepository',

    # Esquema
    'metadata',
    'crear_esquema',

    # Implementaciones SQL
    'SqlRepository',
    'CategoryRepository',
    'ProductRepository',
    'SaleRepository',
    'PurchaseRepository',
    'UserRepository',
]
