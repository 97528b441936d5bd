# ==============================================================================
# SERVICIO DE COMPRAS
# ==============================================================================
# Compras a proveedores: ingresan unidades al stock.
#
# Igual que una venta pero sin IGV: cabecera + líneas + aumento de stock en
# una sola transacción. El monto de la compra siempre se calcula a partir
# de sus líneas; anular o editar una línea revierte su efecto en el stock.
# ==============================================================================

import logging
from typing import Any, Dict, List, Tuple

from carpets_pos.errors import NotFoundError, ValidationError
from carpets_pos.models import Product, Purchase, PurchaseLine, redondear_precio
from carpets_pos.repositories.interfaces import IProductRepository, IPurchaseRepository

logger = logging.getLogger(__name__)


def calcular_monto_compra(lines: List[PurchaseLine]) -> float:
    """Σ(unidades × precio_unitario), redondeado a 2 decimales."""
    return round(sum(line.line_total for line in lines), 2)


class PurchaseService:
    """
    Servicio para gestión de compras.

    Responsabilidades:
    - Registrar compras (atómico, suma stock)
    - Listar compras
    - Eliminar compras o líneas (revierte stock)
    - Editar líneas (aplica la diferencia de stock)
    """

    def __init__(self, purchase_repo: IPurchaseRepository, product_repo: IProductRepository):
        """
        Inicializa el servicio de compras.

        Args:
            purchase_repo: Repositorio de compras
            product_repo: Repositorio de productos
        """
        self.purchase_repo = purchase_repo
        self.product_repo = product_repo

    # =========================================================================
    # VALIDACIONES
    # =========================================================================

    def _validate_line_values(self, unidades: int, precio_unitario: float, producto: Any = None) -> None:
        if unidades <= 0:
            raise ValidationError(f"Unidades inválidas para el producto {producto}: {unidades}")
        if precio_unitario < 0:
            raise ValidationError(f"Precio inválido para el producto {producto}: {precio_unitario}")

    def _apply_stock(self, product_id: int, delta: int, conn: Any) -> None:
        """
        Aplica `delta` al stock dentro de la transacción.

        Raises:
            ValidationError: Si el stock quedaría negativo
        """
        if self.product_repo.adjust_stock(product_id, delta, conn):
            return
        if not self.product_repo.exists(product_id, conn):
            # Producto eliminado: no hay stock que revertir
            logger.warning("Producto %s ya no existe, stock no ajustado (%+d)", product_id, delta)
            return
        raise ValidationError(
            f"Stock insuficiente para revertir la compra del producto {product_id}"
        )

    # =========================================================================
    # REGISTRO
    # =========================================================================

    def registrar_compra(self, purchase: Purchase, lines: List[PurchaseLine]) -> int:
        """
        Registra una compra y suma sus unidades al stock.

        Args:
            purchase: Cabecera (descripción; el monto se recalcula)
            lines: Líneas de la compra

        Returns:
            ID de la compra creada

        Raises:
            ValidationError: Sin líneas o valores inválidos
            NotFoundError: Algún producto no existe
        """
        if not lines:
            raise ValidationError("La compra debe tener al menos un producto")
        for line in lines:
            self._validate_line_values(line.unidades, line.precio_unitario, line.producto_id)

        with self.purchase_repo.transaction() as conn:
            for product_id in {line.producto_id for line in lines}:
                if not self.product_repo.exists(product_id, conn):
                    raise NotFoundError(f"Producto {product_id} no encontrado")

            purchase.monto = calcular_monto_compra(lines)
            purchase.lines = list(lines)
            purchase_id = self.purchase_repo.create(purchase, conn)

            for line in lines:
                if not self.product_repo.adjust_stock(line.producto_id, line.unidades, conn):
                    raise NotFoundError(f"Producto {line.producto_id} no encontrado")

        logger.info("Compra %s: %d líneas, monto=%.2f", purchase_id, len(lines), purchase.monto)
        return purchase_id

    # =========================================================================
    # CONSULTAS
    # =========================================================================

    def listar_compras(self) -> Tuple[List[Purchase], Dict[int, Product]]:
        """
        Todas las compras con sus líneas.

        Returns:
            (compras, productos por ID) para resolver la imagen de cada compra
        """
        purchases = self.purchase_repo.find_all()
        ids = {p.lines[0].producto_id for p in purchases if p.lines}
        products = {p.id: p for p in self.product_repo.find_by_ids(list(ids))}
        return purchases, products

    # =========================================================================
    # ANULACIÓN Y EDICIÓN
    # =========================================================================

    def eliminar_compra(self, purchase_id: int) -> None:
        """
        Elimina una compra y resta del stock las unidades que había sumado.

        Raises:
            NotFoundError: Si la compra no existe
            ValidationError: Si algún stock quedaría negativo (no se elimina nada)
        """
        with self.purchase_repo.transaction() as conn:
            purchase = self.purchase_repo.find_by_id(purchase_id, conn)
            if purchase is None:
                raise NotFoundError(f"Compra {purchase_id} no encontrada")
            for line in purchase.lines:
                self._apply_stock(line.producto_id, -line.unidades, conn)
            self.purchase_repo.delete(purchase_id, conn)
        logger.info("Compra %s eliminada", purchase_id)

    def eliminar_detalle(self, line_id: int) -> None:
        """
        Elimina una línea de compra, revierte su stock y recalcula el monto.

        Raises:
            NotFoundError: Si la línea no existe
            ValidationError: Si el stock quedaría negativo
        """
        with self.purchase_repo.transaction() as conn:
            line = self.purchase_repo.find_line(line_id, conn)
            if line is None:
                raise NotFoundError(f"Detalle de compra {line_id} no encontrado")
            self._apply_stock(line.producto_id, -line.unidades, conn)
            self.purchase_repo.delete_line(line_id, conn)
            monto = self.purchase_repo.recalculate_total(line.compra_id, conn)
        logger.info("Detalle %s eliminado; compra %s monto=%.2f", line_id, line.compra_id, monto)

    def editar_detalle(self, line_id: int, unidades: int, precio_unitario: float) -> None:
        """
        Cambia unidades y precio de una línea de compra.

        La diferencia de unidades se aplica al stock y el monto de la
        compra se recalcula, todo en la misma transacción.

        Raises:
            NotFoundError: Si la línea no existe
            ValidationError: Valores inválidos o stock negativo
        """
        with self.purchase_repo.transaction() as conn:
            line = self.purchase_repo.find_line(line_id, conn)
            if line is None:
                raise NotFoundError(f"Detalle de compra {line_id} no encontrado")
            precio_unitario = redondear_precio(precio_unitario)
            self._validate_line_values(unidades, precio_unitario, line.producto_id)

            delta = unidades - line.unidades
            if delta:
                self._apply_stock(line.producto_id, delta, conn)
            self.purchase_repo.update_line(line_id, unidades, precio_unitario, conn)
            monto = self.purchase_repo.recalculate_total(line.compra_id, conn)
        logger.info("Detalle %s editado; compra %s monto=%.2f", line_id, line.compra_id, monto)
