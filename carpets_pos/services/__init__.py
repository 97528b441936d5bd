# ==============================================================================
# CAPA DE SERVICIOS - Lógica de negocio
# ==============================================================================
# Esta capa contiene TODA la lógica de negocio de la aplicación.
#
# PRINCIPIOS:
# 1. Los servicios orquestan operaciones entre repositorios
# 2. Aplican reglas de negocio y validaciones (lanzan ValidationError /
#    NotFoundError)
# 3. Los manejadores de canal solo traducen y llaman a servicios
# 4. Los servicios dependen de INTERFACES de repositorios, no de SQL
#
# ESTRUCTURA:
# ├── user_service.py     → Autenticación, alta de usuarios, migración de hashes
# ├── product_service.py  → Productos, búsquedas, stock, ganancia
# ├── sale_service.py     → Ventas atómicas, montos con IGV, boletas
# └── purchase_service.py → Compras atómicas, edición/anulación de líneas
# ==============================================================================

from carpets_pos.services.user_service import UserService
from carpets_pos.services.product_service import ProductService
from carpets_pos.services.sale_service import SaleService, calcular_montos, calcular_montos_linea
from carpets_pos.services.purchase_service import PurchaseService, calcular_monto_compra

__all__ = [
    'UserService',
    'ProductService',
    'SaleService',
    'PurchaseService',
    'calcular_montos',
    'calcular_montos_linea',
    'calcular_monto_compra',
]
