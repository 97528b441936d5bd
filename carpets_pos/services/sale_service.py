# ==============================================================================
# SERVICIO DE VENTAS
# ==============================================================================
# Centraliza toda la lógica de negocio relacionada con ventas.
# Gestiona el ciclo de vida completo de una venta:
#
#   validar líneas → calcular montos → [cabecera + líneas + stock] → ID
#
# Lo que está entre corchetes ocurre en UNA transacción: o se guarda todo,
# o no se guarda nada.
# ==============================================================================

import logging
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Tuple

from carpets_pos.config import DEFAULT_TAX_RATE
from carpets_pos.errors import NotFoundError, ValidationError
from carpets_pos.models import Product, Receipt, Sale, SaleAmounts, SaleLine
from carpets_pos.repositories.interfaces import IProductRepository, ISaleRepository

logger = logging.getLogger(__name__)


# ==============================================================================
# CÁLCULO DE MONTOS (funciones puras)
# ==============================================================================

def calcular_montos(lines: Iterable[SaleLine], tax_rate: float = DEFAULT_TAX_RATE) -> SaleAmounts:
    """
    Calcula subtotal, IGV y total de un conjunto de líneas.

    subtotal = Σ(precio_unitario × cantidad)
    igv      = subtotal × tax_rate
    total    = subtotal + igv

    Args:
        lines: Líneas de la venta
        tax_rate: Tasa de IGV (0.18 por defecto)

    Returns:
        SaleAmounts con los tres montos redondeados a 2 decimales
    """
    subtotal = round(sum(line.precio_unitario * line.cantidad for line in lines), 2)
    igv = round(subtotal * tax_rate, 2)
    total = round(subtotal + igv, 2)
    return SaleAmounts(subtotal=subtotal, igv=igv, total=total)


def calcular_montos_linea(
    precio_unitario: float,
    cantidad: int,
    tax_rate: float = DEFAULT_TAX_RATE
) -> SaleAmounts:
    """Montos de una sola línea (precio unitario × cantidad)."""
    return calcular_montos(
        [SaleLine(producto_id=0, cantidad=cantidad, precio_unitario=precio_unitario)],
        tax_rate,
    )


class SaleService:
    """
    Servicio para gestión de ventas.

    Responsabilidades:
    - Registrar ventas (cabecera, líneas y descuento de stock, atómico)
    - Listados (todas, por día) con los productos de cada línea
    - Anulación con devolución de stock
    - Cálculo de montos y boletas
    """

    def __init__(
        self,
        sale_repo: ISaleRepository,
        product_repo: IProductRepository,
        tax_rate: float = DEFAULT_TAX_RATE
    ):
        """
        Inicializa el servicio de ventas.

        Args:
            sale_repo: Repositorio de ventas
            product_repo: Repositorio de productos (stock y nombres)
            tax_rate: Tasa de IGV
        """
        self.sale_repo = sale_repo
        self.product_repo = product_repo
        self.tax_rate = tax_rate

    # =========================================================================
    # MONTOS
    # =========================================================================

    def montos(self, lines: List[SaleLine]) -> SaleAmounts:
        return calcular_montos(lines, self.tax_rate)

    def montos_linea(self, precio_unitario: float, cantidad: int) -> SaleAmounts:
        return calcular_montos_linea(precio_unitario, cantidad, self.tax_rate)

    def total(self, lines: List[SaleLine]) -> float:
        """Total con IGV de un conjunto de líneas."""
        return self.montos(lines).total

    # =========================================================================
    # REGISTRO
    # =========================================================================

    def validate_lines(self, lines: List[SaleLine]) -> Dict[int, int]:
        """
        Valida la forma de las líneas.

        Returns:
            Unidades pedidas por producto (un producto puede repetirse)

        Raises:
            ValidationError: Sin líneas, cantidad no positiva o precio negativo
        """
        if not lines:
            raise ValidationError("La venta debe tener al menos un producto")

        requested: Dict[int, int] = {}
        for line in lines:
            if line.cantidad <= 0:
                raise ValidationError(
                    f"Cantidad inválida para el producto {line.producto_id}: {line.cantidad}"
                )
            if line.precio_unitario < 0:
                raise ValidationError(
                    f"Precio inválido para el producto {line.producto_id}: {line.precio_unitario}"
                )
            requested[line.producto_id] = requested.get(line.producto_id, 0) + line.cantidad
        return requested

    def registrar_venta(self, sale: Sale, lines: List[SaleLine]) -> int:
        """
        Registra una venta completa.

        Cabecera, líneas y descuento de stock comparten la transacción:
        ante cualquier error no queda nada guardado.

        Args:
            sale: Cabecera (cliente, descripción, vendedor)
            lines: Líneas del carrito

        Returns:
            ID de la venta creada

        Raises:
            ValidationError: Líneas inválidas o stock insuficiente
            NotFoundError: Algún producto no existe
            PersistenceError: Fallo de base de datos
        """
        requested = self.validate_lines(lines)
        amounts = self.montos(lines)

        with self.sale_repo.transaction() as conn:
            for product_id, cantidad in requested.items():
                product = self.product_repo.find_by_id(product_id, conn)
                if product is None:
                    raise NotFoundError(f"Producto {product_id} no encontrado")
                if product.cantidad < cantidad:
                    raise ValidationError(
                        f"Stock insuficiente para {product.nombre}. "
                        f"Solicitado: {cantidad}, Disponible: {product.cantidad}"
                    )

            sale.fecha = datetime.now()
            sale.monto = amounts.total
            sale.lines = list(lines)
            sale_id = self.sale_repo.create(sale, conn)

            for product_id, cantidad in requested.items():
                if not self.product_repo.adjust_stock(product_id, -cantidad, conn):
                    raise ValidationError(f"Stock insuficiente para el producto {product_id}")

        logger.info(
            "Venta %s: %d líneas, subtotal=%.2f igv=%.2f total=%.2f",
            sale_id, len(lines), amounts.subtotal, amounts.igv, amounts.total
        )
        return sale_id

    def eliminar_venta(self, sale_id: int) -> None:
        """
        Elimina una venta y devuelve al stock las unidades vendidas.

        Las líneas de productos ya eliminados no devuelven stock.

        Raises:
            NotFoundError: Si la venta no existe
        """
        with self.sale_repo.transaction() as conn:
            sale = self.sale_repo.find_by_id(sale_id, conn)
            if sale is None:
                raise NotFoundError(f"Venta {sale_id} no encontrada")
            self.sale_repo.delete(sale_id, conn)
            for line in sale.lines:
                if not self.product_repo.adjust_stock(line.producto_id, line.cantidad, conn):
                    logger.warning(
                        "Venta %s: producto %s ya no existe, stock no devuelto",
                        sale_id, line.producto_id
                    )
        logger.info("Venta %s eliminada", sale_id)

    # =========================================================================
    # CONSULTAS
    # =========================================================================

    def listar_ventas(self) -> Tuple[List[Sale], Dict[int, Product]]:
        """
        Todas las ventas con sus líneas.

        Returns:
            (ventas, productos por ID) para armar la vista de cada línea
        """
        sales = self.sale_repo.find_all()
        return sales, self._productos_de(sales)

    def ventas_por_dia(self, dia: date) -> Tuple[List[Sale], Dict[int, Product]]:
        """Ventas de un día calendario, con los productos de sus líneas."""
        sales = self.sale_repo.find_by_day(dia)
        return sales, self._productos_de(sales)

    def get_sale(self, sale_id: int) -> Sale:
        sale = self.sale_repo.find_by_id(sale_id)
        if sale is None:
            raise NotFoundError(f"Venta {sale_id} no encontrada")
        return sale

    def generar_boleta(self, sale_id: int, lines: Optional[List[SaleLine]] = None) -> Receipt:
        """
        Arma la boleta de una venta registrada.

        Args:
            sale_id: ID de la venta
            lines: Líneas a facturar; si no se pasan se usan las guardadas

        Returns:
            Receipt con cabecera, líneas y montos
        """
        sale = self.get_sale(sale_id)
        receipt_lines = list(lines) if lines else sale.lines
        return Receipt(sale=sale, lines=receipt_lines, amounts=self.montos(receipt_lines))

    def _productos_de(self, sales: List[Sale]) -> Dict[int, Product]:
        ids = {line.producto_id for sale in sales for line in sale.lines}
        return {p.id: p for p in self.product_repo.find_by_ids(list(ids))}
