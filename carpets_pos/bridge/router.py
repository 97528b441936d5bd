# ==============================================================================
# ENRUTADOR DE COMANDOS
# ==============================================================================
# Registro único de comandos: (canal, nombre) → Comando(aridad, manejador).
#
#   - Canal o comando desconocido  → None (resultado ausente, no es error)
#   - Cantidad de argumentos distinta a la aridad registrada → respuesta de
#     error estructurada, el manejador NO se invoca
# ==============================================================================

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from carpets_pos.bridge.handlers import LoginHandlers, ProductHandlers, PurchaseHandlers, SaleHandlers
from carpets_pos.bridge.translators import error_response

logger = logging.getLogger(__name__)

# Canales expuestos a la interfaz
CANAL_LOGIN = 'Login'
CANAL_PRODUCTOS = 'Productos'
CANAL_VENTA = 'Venta'
CANAL_COMPRA = 'Compra'

ARIDADES_VALIDAS = frozenset([0, 1, 2])


@dataclass(frozen=True)
class Comando:
    """
    Comando invocable desde un canal.

    Attributes:
        nombre: Nombre con el que lo llama la interfaz (ej. 'regVenta')
        canal: Canal al que pertenece
        aridad: Cantidad exacta de argumentos (0, 1 o 2)
        manejador: Función que lo atiende
    """
    nombre: str
    canal: str
    aridad: int
    manejador: Callable[..., Any]


class CommandRouter:
    """Resuelve e invoca comandos registrados."""

    def __init__(self):
        self._comandos: Dict[Tuple[str, str], Comando] = {}

    def registrar(self, comando: Comando) -> None:
        """
        Registra un comando.

        Raises:
            ValueError: Aridad inválida o comando ya registrado en el canal
        """
        if comando.aridad not in ARIDADES_VALIDAS:
            raise ValueError(f"Aridad inválida para {comando.nombre}: {comando.aridad}")
        key = (comando.canal, comando.nombre)
        if key in self._comandos:
            raise ValueError(f"Comando duplicado: {comando.canal}.{comando.nombre}")
        self._comandos[key] = comando

    def resolver(self, canal: str, nombre: str) -> Optional[Comando]:
        return self._comandos.get((canal, nombre))

    def comandos(self, canal: str = None) -> List[Comando]:
        """Comandos registrados (de un canal, o todos)."""
        return [c for c in self._comandos.values() if canal is None or c.canal == canal]

    def canales(self) -> List[str]:
        return sorted({c.canal for c in self._comandos.values()})

    def dirigir(self, canal: str, nombre: str, argumentos: Sequence[Any] = ()) -> Any:
        """
        Invoca el comando con sus argumentos posicionales.

        Args:
            canal: Canal de origen
            nombre: Nombre del comando
            argumentos: Argumentos en orden

        Returns:
            Resultado del manejador, None si el comando no existe, o
            {'status': 'error', 'mensaje'} si la aridad no coincide
        """
        comando = self.resolver(canal, nombre)
        if comando is None:
            logger.warning("Comando desconocido: %s.%s", canal, nombre)
            return None

        argumentos = list(argumentos or [])
        if len(argumentos) != comando.aridad:
            logger.warning(
                "Aridad incorrecta para %s.%s: esperaba %d, recibió %d",
                canal, nombre, comando.aridad, len(argumentos)
            )
            return error_response(
                f"El comando {nombre} espera {comando.aridad} argumento(s) y recibió {len(argumentos)}"
            )

        logger.debug("Ejecutando %s.%s", canal, nombre)
        return comando.manejador(*argumentos)


def build_router(
    login: LoginHandlers,
    productos: ProductHandlers,
    ventas: SaleHandlers,
    compras: PurchaseHandlers
) -> CommandRouter:
    """Arma el enrutador con todos los comandos de la aplicación."""
    router = CommandRouter()
    tabla = [
        # Login
        (CANAL_LOGIN, 'login', 2, login.login),

        # Productos
        (CANAL_PRODUCTOS, 'getProduct', 0, productos.get_product),
        (CANAL_PRODUCTOS, 'SumGanancia', 0, productos.sum_ganancia),
        (CANAL_PRODUCTOS, 'addProduct', 1, productos.add_product),
        (CANAL_PRODUCTOS, 'editProduct', 1, productos.edit_product),
        (CANAL_PRODUCTOS, 'deleteProduct', 1, productos.delete_product),
        (CANAL_PRODUCTOS, 'ProductoExists', 1, productos.producto_exists),
        (CANAL_PRODUCTOS, 'getProdID', 1, productos.get_prod_id),
        (CANAL_PRODUCTOS, 'SearchIdNombre', 1, productos.search_id_nombre),
        (CANAL_PRODUCTOS, 'searchProducts', 2, productos.search_products),
        (CANAL_PRODUCTOS, 'ValStock', 2, productos.val_stock),

        # Venta
        (CANAL_VENTA, 'listVentas', 0, ventas.list_ventas),
        (CANAL_VENTA, 'regVenta', 2, ventas.reg_venta),
        (CANAL_VENTA, 'getVentaPorDay', 1, ventas.get_venta_por_day),
        (CANAL_VENTA, 'deleteVenta', 1, ventas.delete_venta),
        (CANAL_VENTA, 'calcMontos', 2, ventas.calc_montos),
        (CANAL_VENTA, 'calcMontVentCom', 1, ventas.calc_mont_vent_com),
        (CANAL_VENTA, 'calcTotVent', 1, ventas.calc_tot_vent),
        (CANAL_VENTA, 'genBoletaVenta', 2, ventas.gen_boleta_venta),

        # Compra
        (CANAL_COMPRA, 'listCompras', 0, compras.list_compras),
        (CANAL_COMPRA, 'RegCompra', 2, compras.reg_compra),
        (CANAL_COMPRA, 'deleteCompra', 1, compras.delete_compra),
        (CANAL_COMPRA, 'deleteDetCompra', 1, compras.delete_det_compra),
        (CANAL_COMPRA, 'editDetCompra', 2, compras.edit_det_compra),
    ]
    for canal, nombre, aridad, manejador in tabla:
        router.registrar(Comando(nombre=nombre, canal=canal, aridad=aridad, manejador=manejador))
    return router
