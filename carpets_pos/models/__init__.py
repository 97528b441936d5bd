# ==============================================================================
# CAPA DE MODELOS - Estructuras de datos del sistema
# ==============================================================================
# Entidades del dominio como dataclasses. Son independientes del transporte
# (canal de la app móvil) y saben convertirse a/desde filas de MySQL.
# ==============================================================================

from .entities import (
    # Usuarios
    User,
    UserRole,

    # Productos
    Category,
    Product,

    # Ventas
    Sale,
    SaleLine,
    SaleAmounts,
    Receipt,

    # Compras
    Purchase,
    PurchaseLine,

    PRODUCTO_ELIMINADO,
    redondear_precio,
)

__all__ = [
    'User',
    'UserRole',
    'Category',
    'Product',
    'Sale',
    'SaleLine',
    'SaleAmounts',
    'Receipt',
    'Purchase',
    'PurchaseLine',
    'PRODUCTO_ELIMINADO',
    'redondear_precio',
]
