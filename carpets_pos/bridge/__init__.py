# ==============================================================================
# PUENTE DE CANALES - Frontera entre la interfaz y los servicios
# ==============================================================================
# ESTRUCTURA:
# ├── translators.py → Mapas del canal ⇄ entidades (validación de claves)
# ├── handlers.py    → Un manejador por comando, errores → respuesta
# ├── router.py      → Registro (canal, nombre) → Comando(aridad, manejador)
# └── dispatcher.py  → Ejecución en pool de hilos, resultado por Future
# ==============================================================================

from carpets_pos.bridge.handlers import LoginHandlers, ProductHandlers, PurchaseHandlers, SaleHandlers
from carpets_pos.bridge.router import (
    CANAL_COMPRA,
    CANAL_LOGIN,
    CANAL_PRODUCTOS,
    CANAL_VENTA,
    Comando,
    CommandRouter,
    build_router,
)
from carpets_pos.bridge.dispatcher import CommandDispatcher

__all__ = [
    'LoginHandlers',
    'ProductHandlers',
    'SaleHandlers',
    'PurchaseHandlers',
    'Comando',
    'CommandRouter',
    'build_router',
    'CommandDispatcher',
    'CANAL_LOGIN',
    'CANAL_PRODUCTOS',
    'CANAL_VENTA',
    'CANAL_COMPRA',
]
