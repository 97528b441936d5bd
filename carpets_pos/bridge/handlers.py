# ==============================================================================
# MANEJADORES DE COMANDOS
# ==============================================================================
# Un manejador por comando del canal. Cada uno:
#   1. Traduce los argumentos crudos (translators)
#   2. Llama al servicio
#   3. Traduce el resultado a un mapa/lista/número para el canal
#
# Ningún error controlado (BridgeError) sale de aquí: @controlado lo
# convierte en {'status': 'error', 'mensaje': ...}.
# ==============================================================================

import logging
from functools import wraps
from typing import Any, Dict, List, Union

from carpets_pos.bridge import translators as tr
from carpets_pos.errors import BridgeError, PersistenceError
from carpets_pos.performance_logger import profile_function
from carpets_pos.services import ProductService, PurchaseService, SaleService, UserService

logger = logging.getLogger(__name__)

CREDENCIALES_INVALIDAS = 'Credenciales inválidas'
LOGIN_EXITOSO = 'Login exitoso'


def controlado(fn):
    """Convierte cualquier BridgeError del manejador en una respuesta de error."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except PersistenceError as exc:
            logger.error("Comando %s falló en la base de datos: %s", fn.__name__, exc.mensaje)
            return tr.error_response(exc.mensaje)
        except BridgeError as exc:
            logger.info("Comando %s rechazado: %s", fn.__name__, exc.mensaje)
            return tr.error_response(exc.mensaje)
    return wrapper


# ==============================================================================
# CANAL Login
# ==============================================================================

class LoginHandlers:
    """Comandos del canal Login."""

    def __init__(self, user_service: UserService):
        self.user_service = user_service

    @profile_function(name="Iniciar sesión")
    @controlado
    def login(self, dni: Any, password: Any) -> Dict[str, Any]:
        """
        login(dni, password)

        Returns:
            {status, mensaje, usuario, rol} o {status: 'error', mensaje}
        """
        user = self.user_service.authenticate(tr.to_text(dni, 'dni'), tr.to_text(password, 'password'))
        if user is None:
            return tr.error_response(CREDENCIALES_INVALIDAS)
        return tr.ok_response(mensaje=LOGIN_EXITOSO, usuario=user.nombre, rol=user.rol)


# ==============================================================================
# CANAL Productos
# ==============================================================================

class ProductHandlers:
    """Comandos del canal Productos."""

    def __init__(self, product_service: ProductService):
        self.product_service = product_service

    @profile_function(name="Listar productos")
    @controlado
    def get_product(self) -> Union[List[Dict[str, Any]], Dict[str, Any]]:
        return [tr.product_to_view(p) for p in self.product_service.list_products()]

    @profile_function(name="Ganancia total")
    @controlado
    def sum_ganancia(self) -> Union[float, Dict[str, Any]]:
        return self.product_service.ganancia_total()

    @profile_function(name="Crear producto")
    @controlado
    def add_product(self, datos: Any) -> Dict[str, Any]:
        product = tr.product_from_map(datos)
        return tr.ok_response(id=self.product_service.add_product(product))

    @profile_function(name="Editar producto")
    @controlado
    def edit_product(self, datos: Any) -> Dict[str, Any]:
        self.product_service.update_product(tr.product_from_map(datos, require_id=True))
        return tr.ok_response()

    @profile_function(name="Eliminar producto")
    @controlado
    def delete_product(self, product_id: Any) -> Dict[str, Any]:
        self.product_service.delete_product(tr.to_int(product_id, 'id'))
        return tr.ok_response()

    @controlado
    def producto_exists(self, product_id: Any) -> Union[bool, Dict[str, Any]]:
        return self.product_service.exists(tr.to_int(product_id, 'id'))

    @controlado
    def get_prod_id(self, product_id: Any) -> Dict[str, Any]:
        product = self.product_service.get_product(tr.to_int(product_id, 'id'))
        return tr.ok_response(producto=tr.product_to_view(product))

    @profile_function(name="Buscar producto en venta")
    @controlado
    def search_id_nombre(self, criterio: Any) -> Union[List[Dict[str, Any]], Dict[str, Any]]:
        products = self.product_service.search_id_nombre(tr.to_text(criterio, 'criterio'))
        return [tr.product_to_view(p) for p in products]

    @profile_function(name="Buscar productos")
    @controlado
    def search_products(self, criterio: Any, tipo: Any) -> Union[List[Dict[str, Any]], Dict[str, Any]]:
        products = self.product_service.search(tr.to_text(criterio, 'criterio'), tr.to_text(tipo, 'tipo'))
        return [tr.product_to_view(p) for p in products]

    @controlado
    def val_stock(self, product_id: Any, cantidad: Any) -> Dict[str, Any]:
        disponible, stock = self.product_service.validar_stock(
            tr.to_int(product_id, 'id'), tr.to_int(cantidad, 'cantidad')
        )
        return tr.ok_response(disponible=disponible, stock=stock)


# ==============================================================================
# CANAL Venta
# ==============================================================================

class SaleHandlers:
    """Comandos del canal Venta."""

    def __init__(self, sale_service: SaleService):
        self.sale_service = sale_service

    @profile_function(name="Listar ventas")
    @controlado
    def list_ventas(self) -> Dict[str, Any]:
        sales, products = self.sale_service.listar_ventas()
        return tr.ok_response(ventas=[tr.sale_to_view(s, products) for s in sales])

    @profile_function(name="Registrar venta")
    @controlado
    def reg_venta(self, cabecera: Any, detalles: Any) -> Dict[str, Any]:
        sale = tr.sale_from_map(cabecera)
        lines = tr.sale_lines_from_list(detalles)
        return tr.ok_response(id=self.sale_service.registrar_venta(sale, lines))

    @profile_function(name="Ventas por día")
    @controlado
    def get_venta_por_day(self, fecha: Any) -> Dict[str, Any]:
        sales, products = self.sale_service.ventas_por_dia(tr.to_date(fecha))
        return tr.ok_response(ventas=[tr.sale_to_view(s, products) for s in sales])

    @profile_function(name="Eliminar venta")
    @controlado
    def delete_venta(self, sale_id: Any) -> Dict[str, Any]:
        self.sale_service.eliminar_venta(tr.to_int(sale_id, 'id'))
        return tr.ok_response()

    @controlado
    def calc_montos(self, precio_unitario: Any, cantidad: Any) -> Dict[str, Any]:
        amounts = self.sale_service.montos_linea(
            tr.to_price(precio_unitario, 'precioUnitario'), tr.to_int(cantidad, 'cantidad')
        )
        return tr.amounts_to_view(amounts)

    @controlado
    def calc_mont_vent_com(self, detalles: Any) -> Dict[str, Any]:
        return tr.amounts_to_view(self.sale_service.montos(tr.sale_lines_from_list(detalles)))

    @controlado
    def calc_tot_vent(self, detalles: Any) -> Union[float, Dict[str, Any]]:
        return self.sale_service.total(tr.sale_lines_from_list(detalles))

    @profile_function(name="Generar boleta")
    @controlado
    def gen_boleta_venta(self, sale_id: Any, detalles: Any) -> Dict[str, Any]:
        lines = tr.sale_lines_from_list(detalles) if detalles is not None else []
        receipt = self.sale_service.generar_boleta(tr.to_int(sale_id, 'id'), lines)
        return tr.ok_response(numeroBoleta=receipt.sale.numero_boleta, total=receipt.amounts.total)


# ==============================================================================
# CANAL Compra
# ==============================================================================

class PurchaseHandlers:
    """Comandos del canal Compra."""

    def __init__(self, purchase_service: PurchaseService):
        self.purchase_service = purchase_service

    @profile_function(name="Listar compras")
    @controlado
    def list_compras(self) -> Union[List[Dict[str, Any]], Dict[str, Any]]:
        purchases, products = self.purchase_service.listar_compras()
        return [tr.purchase_to_view(p, products) for p in purchases]

    @profile_function(name="Registrar compra")
    @controlado
    def reg_compra(self, cabecera: Any, detalles: Any) -> Dict[str, Any]:
        purchase = tr.purchase_from_map(cabecera)
        lines = tr.purchase_lines_from_list(detalles)
        return tr.ok_response(id=self.purchase_service.registrar_compra(purchase, lines))

    @profile_function(name="Eliminar compra")
    @controlado
    def delete_compra(self, purchase_id: Any) -> Dict[str, Any]:
        self.purchase_service.eliminar_compra(tr.to_int(purchase_id, 'id'))
        return tr.ok_response()

    @controlado
    def delete_det_compra(self, line_id: Any) -> Dict[str, Any]:
        self.purchase_service.eliminar_detalle(tr.to_int(line_id, 'id'))
        return tr.ok_response()

    @controlado
    def edit_det_compra(self, line_id: Any, datos: Any) -> Dict[str, Any]:
        unidades, precio_unitario = tr.purchase_line_edit_from_map(datos)
        self.purchase_service.editar_detalle(tr.to_int(line_id, 'id'), unidades, precio_unitario)
        return tr.ok_response()
