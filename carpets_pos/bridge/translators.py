# ==============================================================================
# TRADUCTORES - Valores del canal ⇄ entidades del dominio
# ==============================================================================
# Entrada: mapas con claves string y listas que llegan del canal (JSON).
#   - Cada registro declara sus claves obligatorias y opcionales; una clave
#     desconocida o faltante es TranslationError
#   - Números tolerantes: 2, 2.0 y "2" valen lo mismo; los booleanos NO son
#     números
#   - Un campo opcional ausente es None
#
# Salida: mapas con TODAS las claves presentes (None si no hay valor).
# ==============================================================================

import math
from datetime import date, datetime
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple

from carpets_pos.errors import TranslationError
from carpets_pos.models import (
    PRODUCTO_ELIMINADO,
    Product,
    Purchase,
    PurchaseLine,
    Sale,
    SaleAmounts,
    SaleLine,
    redondear_precio,
)

# ==============================================================================
# CLAVES ACEPTADAS POR REGISTRO
# ==============================================================================

PRODUCT_REQUIRED = frozenset(['nombre', 'precioCompra', 'precioVenta', 'categoriaNombre'])
PRODUCT_OPTIONAL = frozenset(['cantidad', 'stock', 'imagePath', 'salePrice', 'fechaIngreso', 'id'])

SALE_REQUIRED: FrozenSet[str] = frozenset()
SALE_OPTIONAL = frozenset(['clienteDni', 'descripcion', 'vendedorId'])

SALE_LINE_REQUIRED = frozenset(['productoId', 'cantidad', 'precioUnitario'])
SALE_LINE_OPTIONAL: FrozenSet[str] = frozenset()

PURCHASE_REQUIRED: FrozenSet[str] = frozenset()
PURCHASE_OPTIONAL = frozenset(['descripcion', 'monto'])

PURCHASE_LINE_REQUIRED = frozenset(['productoId', 'unidades', 'precioUnitario'])
PURCHASE_LINE_OPTIONAL: FrozenSet[str] = frozenset()

PURCHASE_LINE_EDIT_REQUIRED = frozenset(['unidades', 'precioUnitario'])
PURCHASE_LINE_EDIT_OPTIONAL: FrozenSet[str] = frozenset()


# ==============================================================================
# CONVERSIONES BÁSICAS
# ==============================================================================

def to_float(value: Any, campo: str) -> float:
    """
    Convierte un valor numérico tolerante a float.

    Args:
        value: int, float o string numérico
        campo: Nombre del campo (para el mensaje de error)

    Raises:
        TranslationError: Si no es numérico, es booleano o no cabe en un float
    """
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise TranslationError(f"El campo {campo} debe ser numérico")
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (ValueError, OverflowError):
        raise TranslationError(f"El campo {campo} debe ser numérico: {value!r}")
    if not math.isfinite(number):
        raise TranslationError(f"El campo {campo} debe ser un número finito")
    return number


def to_price(value: Any, campo: str) -> float:
    """Como to_float, redondeado a los decimales con que se guardan los precios."""
    return redondear_precio(to_float(value, campo))


def to_int(value: Any, campo: str) -> int:
    """Como to_float, pero exige valor entero (2.0 → 2; 2.5 es error)."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    number = to_float(value, campo)
    if not number.is_integer():
        raise TranslationError(f"El campo {campo} debe ser entero: {value!r}")
    return int(number)


def to_text(value: Any, campo: str) -> str:
    """Texto obligatorio; los enteros se aceptan y se pasan a texto (DNI)."""
    if isinstance(value, bool) or value is None:
        raise TranslationError(f"El campo {campo} debe ser texto")
    if isinstance(value, str):
        return value
    if isinstance(value, int):
        return str(value)
    raise TranslationError(f"El campo {campo} debe ser texto")


def to_optional_text(value: Any, campo: str) -> Optional[str]:
    return None if value is None else to_text(value, campo)


def to_optional_float(value: Any, campo: str) -> Optional[float]:
    return None if value is None else to_float(value, campo)


def to_optional_price(value: Any, campo: str) -> Optional[float]:
    return None if value is None else to_price(value, campo)


def to_optional_int(value: Any, campo: str) -> Optional[int]:
    return None if value is None else to_int(value, campo)


def to_date(value: Any, campo: str = 'fecha') -> date:
    """
    Convierte 'YYYY-MM-DD' (o un datetime ISO) a date.

    Raises:
        TranslationError: Si el formato no es válido
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise TranslationError(f"El campo {campo} debe ser una fecha YYYY-MM-DD")
    texto = value.strip()
    try:
        if len(texto) == 10:
            return date.fromisoformat(texto)
        return datetime.fromisoformat(texto).date()
    except ValueError:
        raise TranslationError(f"Fecha inválida en {campo}: {value!r}")


def to_mapping(value: Any, registro: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise TranslationError(f"Se esperaba un mapa para {registro}")
    return value


def to_list(value: Any, registro: str) -> List[Any]:
    if not isinstance(value, (list, tuple)):
        raise TranslationError(f"Se esperaba una lista para {registro}")
    return list(value)


def check_keys(
    data: Mapping[str, Any],
    required: FrozenSet[str],
    optional: FrozenSet[str],
    registro: str
) -> None:
    """
    Verifica el conjunto de claves de un mapa.

    Raises:
        TranslationError: Si faltan obligatorias o sobran desconocidas
    """
    keys = set(data.keys())
    unknown = keys - required - optional
    if unknown:
        raise TranslationError(
            f"Claves desconocidas en {registro}: {', '.join(sorted(str(k) for k in unknown))}"
        )
    missing = required - keys
    if missing:
        raise TranslationError(f"Faltan claves en {registro}: {', '.join(sorted(missing))}")


# ==============================================================================
# ENTRADA: PRODUCTOS
# ==============================================================================

def product_from_map(value: Any, require_id: bool = False) -> Product:
    """
    Traduce el mapa de addProduct / editProduct.

    Args:
        value: Mapa recibido
        require_id: True para edición (el ID es obligatorio)

    Returns:
        Product (id None en altas)
    """
    data = to_mapping(value, 'producto')
    required = PRODUCT_REQUIRED | {'id'} if require_id else PRODUCT_REQUIRED
    check_keys(data, required, PRODUCT_OPTIONAL, 'producto')

    # 'stock' es alias de 'cantidad'; si vienen ambos manda 'cantidad'
    if data.get('cantidad') is not None:
        cantidad = to_int(data['cantidad'], 'cantidad')
    elif data.get('stock') is not None:
        cantidad = to_int(data['stock'], 'stock')
    else:
        raise TranslationError("Faltan claves en producto: cantidad")

    fecha = data.get('fechaIngreso')
    return Product(
        id=to_int(data['id'], 'id') if require_id else None,
        nombre=to_text(data['nombre'], 'nombre'),
        precio_compra=to_price(data['precioCompra'], 'precioCompra'),
        precio_venta=to_price(data['precioVenta'], 'precioVenta'),
        cantidad=cantidad,
        categoria_nombre=to_text(data['categoriaNombre'], 'categoriaNombre'),
        image_path=to_optional_text(data.get('imagePath'), 'imagePath'),
        precio_oferta=to_optional_price(data.get('salePrice'), 'salePrice'),
        fecha_ingreso=to_date(fecha, 'fechaIngreso') if fecha is not None else None,
    )


# ==============================================================================
# ENTRADA: VENTAS
# ==============================================================================

def sale_from_map(value: Any) -> Sale:
    """Cabecera de regVenta: todas sus claves son opcionales."""
    data = to_mapping(value, 'venta')
    check_keys(data, SALE_REQUIRED, SALE_OPTIONAL, 'venta')
    return Sale(
        cliente_dni=to_optional_text(data.get('clienteDni'), 'clienteDni'),
        descripcion=to_optional_text(data.get('descripcion'), 'descripcion'),
        vendedor_id=to_optional_int(data.get('vendedorId'), 'vendedorId'),
    )


def sale_line_from_map(value: Any) -> SaleLine:
    data = to_mapping(value, 'detalle de venta')
    check_keys(data, SALE_LINE_REQUIRED, SALE_LINE_OPTIONAL, 'detalle de venta')
    return SaleLine(
        producto_id=to_int(data['productoId'], 'productoId'),
        cantidad=to_int(data['cantidad'], 'cantidad'),
        precio_unitario=to_price(data['precioUnitario'], 'precioUnitario'),
    )


def sale_lines_from_list(value: Any) -> List[SaleLine]:
    return [sale_line_from_map(item) for item in to_list(value, 'detalles de venta')]


# ==============================================================================
# ENTRADA: COMPRAS
# ==============================================================================

def purchase_from_map(value: Any) -> Purchase:
    """Cabecera de RegCompra. El monto se valida pero luego se recalcula."""
    data = to_mapping(value, 'compra')
    check_keys(data, PURCHASE_REQUIRED, PURCHASE_OPTIONAL, 'compra')
    monto = to_optional_float(data.get('monto'), 'monto')
    return Purchase(
        descripcion=to_optional_text(data.get('descripcion'), 'descripcion'),
        monto=monto if monto is not None else 0.0,
    )


def purchase_line_from_map(value: Any) -> PurchaseLine:
    data = to_mapping(value, 'detalle de compra')
    check_keys(data, PURCHASE_LINE_REQUIRED, PURCHASE_LINE_OPTIONAL, 'detalle de compra')
    return PurchaseLine(
        producto_id=to_int(data['productoId'], 'productoId'),
        unidades=to_int(data['unidades'], 'unidades'),
        precio_unitario=to_price(data['precioUnitario'], 'precioUnitario'),
    )


def purchase_lines_from_list(value: Any) -> List[PurchaseLine]:
    return [purchase_line_from_map(item) for item in to_list(value, 'detalles de compra')]


def purchase_line_edit_from_map(value: Any) -> Tuple[int, float]:
    """
    Mapa de editDetCompra.

    Returns:
        (unidades, precio_unitario)
    """
    data = to_mapping(value, 'edición de detalle')
    check_keys(data, PURCHASE_LINE_EDIT_REQUIRED, PURCHASE_LINE_EDIT_OPTIONAL, 'edición de detalle')
    return (
        to_int(data['unidades'], 'unidades'),
        to_price(data['precioUnitario'], 'precioUnitario'),
    )


# ==============================================================================
# SALIDA
# ==============================================================================

def ok_response(**extra: Any) -> Dict[str, Any]:
    response: Dict[str, Any] = {'status': 'ok'}
    response.update(extra)
    return response


def error_response(mensaje: str) -> Dict[str, Any]:
    return {'status': 'error', 'mensaje': mensaje}


def product_to_view(product: Product) -> Dict[str, Any]:
    """ProductView: `stock` repite `cantidad` para la vista de inventario."""
    return {
        'id': product.id,
        'nombre': product.nombre,
        'precioCompra': product.precio_compra,
        'precioVenta': product.precio_venta,
        'cantidad': product.cantidad,
        'stock': product.cantidad,
        'categoriaNombre': product.categoria_nombre,
        'imagePath': product.image_path,
        'salePrice': product.precio_oferta,
    }


def sale_line_to_view(line: SaleLine, products: Mapping[int, Product]) -> Dict[str, Any]:
    product = products.get(line.producto_id)
    return {
        'productoId': line.producto_id,
        'cantidad': line.cantidad,
        'precio': line.precio_unitario,
        'nombre': product.nombre if product is not None else PRODUCTO_ELIMINADO,
        'imagePath': product.image_path if product is not None else None,
    }


def sale_to_view(sale: Sale, products: Mapping[int, Product]) -> Dict[str, Any]:
    """
    SaleView con sus líneas.

    Args:
        sale: Venta con líneas cargadas
        products: Productos por ID (los ausentes se muestran como eliminados)
    """
    return {
        'id': sale.id,
        'numeroBoleta': sale.numero_boleta,
        'monto': sale.monto,
        'fecha': sale.fecha.isoformat() if sale.fecha is not None else None,
        'clienteDni': sale.cliente_dni,
        'descripcion': sale.descripcion,
        'detalles': [sale_line_to_view(line, products) for line in sale.lines],
    }


def purchase_to_view(purchase: Purchase, products: Mapping[int, Product]) -> Dict[str, Any]:
    """PurchaseView: la imagen es la del producto de la primera línea."""
    image_path = None
    if purchase.lines:
        product = products.get(purchase.lines[0].producto_id)
        if product is not None:
            image_path = product.image_path
    return {
        'id': purchase.id,
        'descripcion': purchase.descripcion,
        'monto': purchase.monto,
        'imagePath': image_path,
    }


def amounts_to_view(amounts: SaleAmounts) -> Dict[str, float]:
    return {
        'subtotal': amounts.subtotal,
        'igv': amounts.igv,
        'total': amounts.total,
    }
