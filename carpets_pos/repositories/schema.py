# ==============================================================================
# ESQUEMA RELACIONAL - Tablas de la base MySQL existente
# ==============================================================================
# Los nombres de tablas y columnas se conservan EXACTAMENTE como en la base
# de producción (producto.idproducto, detalle_venta.precio_unitario, ...).
# La misma definición sirve para crear la base en SQLite durante los tests.
# ==============================================================================

import logging

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
)
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

metadata = MetaData()

# Montos como float en Python (asdecimal=False), DECIMAL(10,2) en MySQL
Money = Numeric(10, 2, asdecimal=False)


categoria = Table(
    'categoria', metadata,
    Column('idcategoria', Integer, primary_key=True, autoincrement=True),
    Column('nombre', String(100), nullable=False, unique=True),
)

producto = Table(
    'producto', metadata,
    Column('idproducto', Integer, primary_key=True, autoincrement=True),
    Column('nombre', String(150), nullable=False),
    Column('fecha_ingreso', Date),
    Column('precio_compra', Money, nullable=False, default=0),
    Column('precio_venta', Money, nullable=False, default=0),
    Column('cantidad', Integer, nullable=False, default=0),
    Column('categoria_nombre', String(100)),
    Column('image_path', String(255)),
    Column('precio_oferta', Money, nullable=True),
)

usuario = Table(
    'usuario', metadata,
    Column('idusuario', Integer, primary_key=True, autoincrement=True),
    Column('nombre', String(100), nullable=False, unique=True),
    Column('password', String(255), nullable=False),
    Column('rol', String(50), nullable=False, default='vendedor'),
)

venta = Table(
    'venta', metadata,
    Column('idventa', Integer, primary_key=True, autoincrement=True),
    Column('cliente_dni', String(20)),
    Column('descripcion', String(255)),
    Column('fecha', DateTime),
    Column('vendedor_id', Integer),
    Column('numero_boleta', String(50)),
    Column('monto', Money, nullable=False, default=0),
)

# idproducto NO es FK: las líneas históricas sobreviven al borrado del producto
detalle_venta = Table(
    'detalle_venta', metadata,
    Column('iddetalle', Integer, primary_key=True, autoincrement=True),
    Column('idventa', Integer, ForeignKey('venta.idventa'), nullable=False),
    Column('idproducto', Integer, nullable=False),
    Column('cantidad', Integer, nullable=False),
    Column('precio_unitario', Money, nullable=False),
)

compra = Table(
    'compra', metadata,
    Column('idcompra', Integer, primary_key=True, autoincrement=True),
    Column('descripcion', String(255)),
    Column('monto', Money, nullable=False, default=0),
)

detalle_compra = Table(
    'detalle_compra', metadata,
    Column('iddetalle', Integer, primary_key=True, autoincrement=True),
    Column('idcompra', Integer, ForeignKey('compra.idcompra'), nullable=False),
    Column('idproducto', Integer, nullable=False),
    Column('unidades', Integer, nullable=False),
    Column('precio_unitario', Money, nullable=False),
)


def crear_esquema(engine: Engine) -> None:
    """
    Crea las tablas que falten (no toca las existentes).

    Args:
        engine: Engine de SQLAlchemy ya configurado
    """
    metadata.create_all(engine)
    logger.info("Esquema verificado en %s", engine.url.render_as_string(hide_password=True))
