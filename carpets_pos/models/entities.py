# ==============================================================================
# ENTIDADES DEL DOMINIO - Definiciones de dataclasses
# ==============================================================================
# Cada entidad representa un concepto del negocio y conoce su fila en MySQL
# (to_row / from_row). Los nombres de columna son los de la base existente.
# ==============================================================================

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, Mapping
from enum import Enum
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal


# Texto mostrado cuando una línea histórica apunta a un producto borrado
PRODUCTO_ELIMINADO = 'Producto Eliminado'

# Los precios se guardan como DECIMAL(10,2); MySQL redondea hacia arriba en .5
CENTIMOS = Decimal("0.01")


def redondear_precio(valor: float) -> float:
    """Redondea un precio a la precisión con la que se persiste."""
    return float(Decimal(str(valor)).quantize(CENTIMOS, rounding=ROUND_HALF_UP))


# ==============================================================================
# ENUMERACIONES
# ==============================================================================

class UserRole(str, Enum):
    """Roles de usuario disponibles en el sistema."""
    ADMIN = "admin"
    VENDEDOR = "vendedor"


# ==============================================================================
# USUARIOS
# ==============================================================================

@dataclass
class User:
    """
    Usuario del sistema.

    Attributes:
        id: Identificador (idusuario)
        nombre: Nombre de inicio de sesión (el DNI en la app móvil)
        password_hash: Hash werkzeug (o texto plano legacy antes de migrar)
        rol: Rol del usuario
    """
    nombre: str
    password_hash: str
    rol: str = UserRole.VENDEDOR.value
    id: Optional[int] = None

    def is_admin(self) -> bool:
        """Verifica si el usuario tiene permisos de administrador."""
        return self.rol == UserRole.ADMIN.value

    def to_row(self) -> Dict[str, Any]:
        """Convierte a columnas de la tabla usuario."""
        return {
            'nombre': self.nombre,
            'password': self.password_hash,
            'rol': self.rol,
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> 'User':
        """Crea instancia desde una fila de la tabla usuario."""
        return cls(
            id=row['idusuario'],
            nombre=row['nombre'],
            password_hash=row['password'] or '',
            rol=row['rol'] or UserRole.VENDEDOR.value,
        )


# ==============================================================================
# PRODUCTOS
# ==============================================================================

@dataclass
class Category:
    """Categoría de productos (tabla categoria)."""
    nombre: str
    id: Optional[int] = None


@dataclass
class Product:
    """
    Producto del inventario.

    Attributes:
        id: Identificador (idproducto), None hasta que se inserta
        nombre: Nombre del producto
        fecha_ingreso: Fecha de ingreso al inventario
        precio_compra: Costo unitario
        precio_venta: Precio de venta regular
        cantidad: Stock disponible
        categoria_nombre: Nombre de la categoría (se crea si no existe)
        image_path: Ruta de la imagen en el dispositivo
        precio_oferta: Precio promocional; solo existe si es positivo
    """
    nombre: str
    precio_compra: float
    precio_venta: float
    cantidad: int
    categoria_nombre: str
    fecha_ingreso: Optional[date] = None
    image_path: Optional[str] = None
    precio_oferta: Optional[float] = None
    id: Optional[int] = None

    def __post_init__(self):
        # Una oferta no positiva equivale a "sin oferta"
        if self.precio_oferta is not None and self.precio_oferta <= 0:
            self.precio_oferta = None

    @property
    def ganancia_unitaria(self) -> float:
        """Margen por unidad al precio regular."""
        return round(self.precio_venta - self.precio_compra, 2)

    def to_row(self) -> Dict[str, Any]:
        """Convierte a columnas de la tabla producto (sin la PK)."""
        return {
            'nombre': self.nombre,
            'fecha_ingreso': self.fecha_ingreso or date.today(),
            'precio_compra': self.precio_compra,
            'precio_venta': self.precio_venta,
            'cantidad': self.cantidad,
            'categoria_nombre': self.categoria_nombre,
            'image_path': self.image_path,
            'precio_oferta': self.precio_oferta,
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> 'Product':
        """Crea instancia desde una fila de la tabla producto."""
        return cls(
            id=row['idproducto'],
            nombre=row['nombre'],
            fecha_ingreso=row['fecha_ingreso'],
            precio_compra=float(row['precio_compra'] or 0),
            precio_venta=float(row['precio_venta'] or 0),
            cantidad=int(row['cantidad'] or 0),
            categoria_nombre=row['categoria_nombre'],
            image_path=row['image_path'],
            precio_oferta=float(row['precio_oferta']) if row['precio_oferta'] is not None else None,
        )


# ==============================================================================
# VENTAS
# ==============================================================================

@dataclass
class SaleLine:
    """
    Línea de una venta (tabla detalle_venta).

    Attributes:
        producto_id: Producto vendido
        cantidad: Unidades vendidas
        precio_unitario: Precio cobrado por unidad
        id: Identificador de la línea
        venta_id: Venta a la que pertenece
    """
    producto_id: int
    cantidad: int
    precio_unitario: float
    id: Optional[int] = None
    venta_id: Optional[int] = None

    def __post_init__(self):
        self.precio_unitario = redondear_precio(self.precio_unitario)

    @property
    def line_total(self) -> float:
        """Total de la línea (cantidad * precio_unitario)."""
        return self.cantidad * self.precio_unitario

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> 'SaleLine':
        return cls(
            id=row['iddetalle'],
            venta_id=row['idventa'],
            producto_id=row['idproducto'],
            cantidad=int(row['cantidad']),
            precio_unitario=float(row['precio_unitario']),
        )


@dataclass
class Sale:
    """
    Cabecera de venta (tabla venta).

    Attributes:
        id: Identificador (idventa)
        cliente_dni: DNI del comprador
        descripcion: Nota libre
        fecha: Momento de la venta
        vendedor_id: Usuario que vendió
        numero_boleta: Número de boleta ("Venta #<id>")
        monto: Total cobrado, IGV incluido
        lines: Líneas de la venta, en orden
    """
    cliente_dni: Optional[str] = None
    descripcion: Optional[str] = None
    fecha: Optional[datetime] = None
    vendedor_id: Optional[int] = None
    numero_boleta: Optional[str] = None
    monto: float = 0.0
    id: Optional[int] = None
    lines: List[SaleLine] = field(default_factory=list)

    def to_row(self) -> Dict[str, Any]:
        """Convierte a columnas de la tabla venta (sin la PK)."""
        return {
            'cliente_dni': self.cliente_dni,
            'descripcion': self.descripcion,
            'fecha': self.fecha,
            'vendedor_id': self.vendedor_id,
            'numero_boleta': self.numero_boleta,
            'monto': self.monto,
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> 'Sale':
        return cls(
            id=row['idventa'],
            cliente_dni=row['cliente_dni'],
            descripcion=row['descripcion'],
            fecha=row['fecha'],
            vendedor_id=row['vendedor_id'],
            numero_boleta=row['numero_boleta'],
            monto=float(row['monto'] or 0),
        )


@dataclass(frozen=True)
class SaleAmounts:
    """Montos calculados de una venta: subtotal, IGV y total."""
    subtotal: float
    igv: float
    total: float


@dataclass
class Receipt:
    """Boleta de venta: cabecera, líneas y montos."""
    sale: Sale
    lines: List[SaleLine]
    amounts: SaleAmounts


# ==============================================================================
# COMPRAS
# ==============================================================================

@dataclass
class PurchaseLine:
    """
    Línea de una compra (tabla detalle_compra).

    Attributes:
        producto_id: Producto comprado
        unidades: Unidades que ingresan al stock
        precio_unitario: Costo por unidad
    """
    producto_id: int
    unidades: int
    precio_unitario: float
    id: Optional[int] = None
    compra_id: Optional[int] = None

    def __post_init__(self):
        self.precio_unitario = redondear_precio(self.precio_unitario)

    @property
    def line_total(self) -> float:
        return self.unidades * self.precio_unitario

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> 'PurchaseLine':
        return cls(
            id=row['iddetalle'],
            compra_id=row['idcompra'],
            producto_id=row['idproducto'],
            unidades=int(row['unidades']),
            precio_unitario=float(row['precio_unitario']),
        )


@dataclass
class Purchase:
    """Cabecera de compra (tabla compra)."""
    descripcion: Optional[str] = None
    monto: float = 0.0
    id: Optional[int] = None
    lines: List[PurchaseLine] = field(default_factory=list)

    def to_row(self) -> Dict[str, Any]:
        return {
            'descripcion': self.descripcion,
            'monto': self.monto,
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> 'Purchase':
        return cls(
            id=row['idcompra'],
            descripcion=row['descripcion'],
            monto=float(row['monto'] or 0),
        )
