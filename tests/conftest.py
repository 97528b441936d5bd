# -*- coding: utf-8 -*-
"""
Fixtures compartidas: base SQLite en memoria con el esquema de producción,
datos semilla y un contenedor armado alrededor de ese engine.
"""
import os
import sys
from datetime import date

import pytest
from sqlalchemy import create_engine, event, func, insert, select
from sqlalchemy.pool import StaticPool
from werkzeug.security import generate_password_hash

# Asegurar que el proyecto esté en el path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from carpets_pos.app_container import AppContainer
from carpets_pos.config import Settings
from carpets_pos.main import create_app
from carpets_pos.performance_logger import reset_stats
from carpets_pos.repositories import crear_esquema
from carpets_pos.repositories.schema import categoria, producto, usuario

# Productos semilla
PERSA_ID = 1      # stock 10, compra 50, venta 100, con imagen
TAPETE_ID = 2     # stock 3, compra 5, venta 12, sin imagen


@pytest.fixture
def engine():
    """Engine SQLite en memoria compartido entre hilos (StaticPool)."""
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )

    # pysqlite difiere el BEGIN hasta el primer DML; se emite explícito para los SAVEPOINT
    @event.listens_for(engine, "connect")
    def _connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin(conn):
        conn.exec_driver_sql("BEGIN")

    crear_esquema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def seeded_engine(engine):
    with engine.begin() as conn:
        conn.execute(insert(categoria), [{'nombre': 'Alfombras'}, {'nombre': 'Tapetes'}])
        conn.execute(insert(producto), [
            {
                'idproducto': PERSA_ID,
                'nombre': 'Alfombra Persa',
                'fecha_ingreso': date(2024, 1, 10),
                'precio_compra': 50.0,
                'precio_venta': 100.0,
                'cantidad': 10,
                'categoria_nombre': 'Alfombras',
                'image_path': '/img/persa.png',
                'precio_oferta': None,
            },
            {
                'idproducto': TAPETE_ID,
                'nombre': 'Tapete de Baño',
                'fecha_ingreso': date(2024, 2, 1),
                'precio_compra': 5.0,
                'precio_venta': 12.0,
                'cantidad': 3,
                'categoria_nombre': 'Tapetes',
                'image_path': None,
                'precio_oferta': 10.0,
            },
        ])
        conn.execute(insert(usuario), [
            {'nombre': '12345678', 'password': generate_password_hash('1234'), 'rol': 'admin'},
            # Usuario heredado con contraseña en texto plano
            {'nombre': '87654321', 'password': 'clave', 'rol': 'vendedor'},
        ])
    return engine


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url='sqlite://',
        tax_rate=0.18,
        workers=2,
        logs_dir=str(tmp_path / 'logs'),
        enable_profiling=True,
    )


@pytest.fixture
def container(seeded_engine, settings):
    AppContainer.reset_instance()
    reset_stats()
    c = AppContainer(settings, engine=seeded_engine)
    yield c
    AppContainer.reset_instance()


@pytest.fixture
def app(container):
    app = create_app(container)
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


def count_rows(engine, table, *conditions):
    """Cantidad de filas de una tabla (opcionalmente filtradas)."""
    stmt = select(func.count()).select_from(table)
    for condition in conditions:
        stmt = stmt.where(condition)
    with engine.connect() as conn:
        return conn.execute(stmt).scalar()


def stock_of(engine, product_id):
    with engine.connect() as conn:
        return conn.execute(
            select(producto.c.cantidad).where(producto.c.idproducto == product_id)
        ).scalar()
