# ==============================================================================
# SERVICIO DE PRODUCTOS
# ==============================================================================
# Centraliza la lógica de negocio del catálogo e inventario:
# altas/bajas/cambios, búsquedas, validación de stock y ganancia acumulada.
# ==============================================================================

import logging
from typing import List, Optional, Tuple

from carpets_pos.errors import NotFoundError, ValidationError
from carpets_pos.models import Product
from carpets_pos.repositories.interfaces import IProductRepository

logger = logging.getLogger(__name__)

# Tipos de búsqueda aceptados por search()
SEARCH_TYPES = frozenset(['nombre', 'categoria', 'id'])


class ProductService:
    """
    Servicio para gestión de productos.

    Responsabilidades:
    - Validar los datos de un producto antes de persistirlo
    - Búsquedas por nombre, categoría o ID
    - Disponibilidad de stock
    - Ganancia total de las ventas
    """

    def __init__(self, product_repo: IProductRepository):
        """
        Inicializa el servicio de productos.

        Args:
            product_repo: Repositorio de productos
        """
        self.product_repo = product_repo

    # =========================================================================
    # VALIDACIONES
    # =========================================================================

    def validate_product(self, product: Product) -> None:
        """
        Verifica las reglas de negocio de un producto.

        Raises:
            ValidationError: Si algún dato es inválido
        """
        if not (product.nombre or '').strip():
            raise ValidationError("El nombre del producto es obligatorio")
        if product.precio_compra < 0:
            raise ValidationError("El precio de compra no puede ser negativo")
        if product.precio_venta < 0:
            raise ValidationError("El precio de venta no puede ser negativo")
        if product.cantidad < 0:
            raise ValidationError("La cantidad no puede ser negativa")
        if not (product.categoria_nombre or '').strip():
            raise ValidationError("Categoría inválida o vacía")
        product.nombre = product.nombre.strip()

    # =========================================================================
    # ESCRITURA
    # =========================================================================

    def add_product(self, product: Product) -> int:
        """
        Registra un producto nuevo (crea la categoría si no existe).

        Returns:
            ID generado
        """
        product.id = None
        self.validate_product(product)
        return self.product_repo.create(product)

    def update_product(self, product: Product) -> None:
        """
        Actualiza un producto existente.

        Raises:
            NotFoundError: Si el producto no existe
        """
        self.validate_product(product)
        if not self.product_repo.update(product):
            raise NotFoundError(f"Producto {product.id} no encontrado")
        logger.info("Producto %s actualizado", product.id)

    def delete_product(self, product_id: int) -> None:
        """
        Elimina un producto. Sus líneas históricas se conservan.

        Raises:
            NotFoundError: Si el producto no existe
        """
        if not self.product_repo.delete(product_id):
            raise NotFoundError(f"Producto {product_id} no encontrado")

    # =========================================================================
    # CONSULTAS
    # =========================================================================

    def list_products(self) -> List[Product]:
        return self.product_repo.find_all()

    def get_product(self, product_id: int) -> Product:
        """
        Obtiene un producto por ID.

        Raises:
            NotFoundError: Si no existe
        """
        product = self.product_repo.find_by_id(product_id)
        if product is None:
            raise NotFoundError(f"Producto {product_id} no encontrado")
        return product

    def exists(self, product_id: int) -> bool:
        return self.product_repo.exists(product_id)

    def search(self, criterio: str, tipo: str) -> List[Product]:
        """
        Busca productos según el tipo de criterio.

        Args:
            criterio: Texto a buscar
            tipo: 'nombre' (coincidencia parcial), 'categoria' (exacta) o 'id'

        Returns:
            Lista de productos (vacía si no hay coincidencias)

        Raises:
            ValidationError: Si el tipo no es válido
        """
        tipo = (tipo or '').strip().lower()
        if tipo not in SEARCH_TYPES:
            raise ValidationError(f"Tipo de búsqueda inválido: {tipo}")

        criterio = (criterio or '').strip()
        if not criterio:
            return []

        if tipo == 'nombre':
            return self.product_repo.find_by_name(criterio)
        if tipo == 'categoria':
            return self.product_repo.find_by_category(criterio)

        product_id = self._parse_id(criterio)
        if product_id is None:
            return []
        product = self.product_repo.find_by_id(product_id)
        return [product] if product is not None else []

    def search_id_nombre(self, criterio: str) -> List[Product]:
        """
        Búsqueda del buscador de ventas: coincidencia exacta de ID seguida
        de las coincidencias parciales por nombre, sin duplicados.
        """
        criterio = (criterio or '').strip()
        if not criterio:
            return []

        results: List[Product] = []
        product_id = self._parse_id(criterio)
        if product_id is not None:
            product = self.product_repo.find_by_id(product_id)
            if product is not None:
                results.append(product)

        seen = {p.id for p in results}
        for product in self.product_repo.find_by_name(criterio):
            if product.id not in seen:
                results.append(product)
                seen.add(product.id)
        return results

    def validar_stock(self, product_id: int, cantidad: int) -> Tuple[bool, int]:
        """
        Verifica si hay stock suficiente para vender `cantidad` unidades.

        Returns:
            Tupla (disponible, stock_actual)

        Raises:
            NotFoundError: Si el producto no existe
            ValidationError: Si la cantidad no es positiva
        """
        if cantidad <= 0:
            raise ValidationError("La cantidad debe ser mayor a cero")
        product = self.get_product(product_id)
        return product.cantidad >= cantidad, product.cantidad

    def ganancia_total(self) -> float:
        """Ganancia acumulada de todas las ventas registradas."""
        return self.product_repo.get_ganancia_total()

    @staticmethod
    def _parse_id(criterio: str) -> Optional[int]:
        try:
            return int(criterio)
        except (TypeError, ValueError):
            return None
