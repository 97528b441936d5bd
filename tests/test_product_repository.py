# -*- coding: utf-8 -*-
"""
Tests del repositorio y servicio de productos contra SQLite en memoria.
"""
from datetime import date

import pytest

from carpets_pos.errors import NotFoundError, ValidationError
from carpets_pos.models import PRODUCTO_ELIMINADO, Product, Sale, SaleLine
from carpets_pos.repositories.schema import categoria, producto

from conftest import PERSA_ID, TAPETE_ID, count_rows, stock_of


def _kilim(**overrides):
    data = dict(
        nombre='Alfombra Kilim',
        precio_compra=49.9,
        precio_venta=89.5,
        cantidad=6,
        categoria_nombre='Kilims',
        fecha_ingreso=date(2024, 5, 20),
    )
    data.update(overrides)
    return Product(**data)


def test_create_new_category_once(container, seeded_engine):
    repo = container.product_repo
    before = count_rows(seeded_engine, categoria)

    repo.create(_kilim())
    assert count_rows(seeded_engine, categoria) == before + 1
    assert count_rows(seeded_engine, categoria, categoria.c.nombre == 'Kilims') == 1

    repo.create(_kilim(nombre='Kilim pequeño'))
    assert count_rows(seeded_engine, categoria) == before + 1


def test_create_with_empty_category_inserts_nothing(container, seeded_engine):
    before = count_rows(seeded_engine, producto)
    with pytest.raises(ValidationError):
        container.product_repo.create(_kilim(categoria_nombre='   '))
    assert count_rows(seeded_engine, producto) == before


def test_round_trip_without_offer(container):
    product = _kilim()
    product_id = container.product_repo.create(product)

    found = container.product_repo.find_by_id(product_id)
    assert found == product
    assert found.precio_oferta is None


def test_non_positive_offer_is_absent():
    assert _kilim(precio_oferta=0).precio_oferta is None
    assert _kilim(precio_oferta=-3.0).precio_oferta is None


def test_create_defaults_fecha_ingreso(container):
    product_id = container.product_repo.create(_kilim(fecha_ingreso=None))
    assert container.product_repo.find_by_id(product_id).fecha_ingreso == date.today()


def test_update_and_delete(container):
    repo = container.product_repo
    product = repo.find_by_id(PERSA_ID)
    product.precio_venta = 120.0
    product.categoria_nombre = 'Premium'
    assert repo.update(product)
    assert repo.find_by_id(PERSA_ID).precio_venta == 120.0
    assert container.category_repo.exists('Premium')

    assert repo.delete(PERSA_ID)
    assert repo.find_by_id(PERSA_ID) is None
    assert not repo.delete(PERSA_ID)


def test_adjust_stock_never_negative(container, seeded_engine):
    repo = container.product_repo
    assert repo.adjust_stock(TAPETE_ID, -3)
    assert stock_of(seeded_engine, TAPETE_ID) == 0
    assert not repo.adjust_stock(TAPETE_ID, -1)
    assert stock_of(seeded_engine, TAPETE_ID) == 0
    assert not repo.adjust_stock(404, 1)


def test_queries(container):
    repo = container.product_repo
    assert [p.id for p in repo.find_by_name('persa')] == [PERSA_ID]
    assert [p.id for p in repo.find_by_category('Tapetes')] == [TAPETE_ID]
    assert [p.id for p in repo.find_by_ids([TAPETE_ID, 404, TAPETE_ID])] == [TAPETE_ID]
    assert repo.exists(PERSA_ID)
    assert not repo.exists(404)
    assert repo.find_by_id(TAPETE_ID).precio_oferta == 10.0


def test_ganancia_total(container):
    assert container.product_repo.get_ganancia_total() == 0.0

    container.sale_service.registrar_venta(Sale(), [
        SaleLine(producto_id=PERSA_ID, cantidad=2, precio_unitario=100.0),
        SaleLine(producto_id=TAPETE_ID, cantidad=1, precio_unitario=12.0),
    ])
    # (100 - 50) * 2 + (12 - 5) * 1
    assert container.product_repo.get_ganancia_total() == pytest.approx(107.0)


def test_deleted_product_shows_placeholder(container):
    """Borrar un producto vendido no rompe el listado de ventas."""
    container.sale_service.registrar_venta(
        Sale(), [SaleLine(producto_id=TAPETE_ID, cantidad=1, precio_unitario=12.0)]
    )
    container.product_service.delete_product(TAPETE_ID)

    resultado = container.router.dirigir('Venta', 'listVentas', [])
    assert resultado['status'] == 'ok'
    detalle = resultado['ventas'][0]['detalles'][0]
    assert detalle['nombre'] == PRODUCTO_ELIMINADO
    assert detalle['imagePath'] is None


# =============================================================================
# SERVICIO
# =============================================================================

def test_service_search(container):
    service = container.product_service
    assert [p.id for p in service.search('Persa', 'nombre')] == [PERSA_ID]
    assert [p.id for p in service.search('Tapetes', 'categoria')] == [TAPETE_ID]
    assert [p.id for p in service.search(str(PERSA_ID), 'id')] == [PERSA_ID]
    assert service.search('abc', 'id') == []
    assert service.search('  ', 'nombre') == []
    with pytest.raises(ValidationError):
        service.search('x', 'color')


def test_service_search_id_nombre(container):
    service = container.product_service
    kilim_id = service.add_product(_kilim(nombre='Alfombra 2 metros'))

    # El ID exacto primero, luego coincidencias por nombre sin repetir
    results = service.search_id_nombre('2')
    assert [p.id for p in results] == [TAPETE_ID, kilim_id]


def test_service_validar_stock(container):
    service = container.product_service
    assert service.validar_stock(TAPETE_ID, 3) == (True, 3)
    assert service.validar_stock(TAPETE_ID, 4) == (False, 3)
    with pytest.raises(ValidationError):
        service.validar_stock(TAPETE_ID, 0)
    with pytest.raises(NotFoundError):
        service.validar_stock(404, 1)


def test_service_rejects_invalid_product(container):
    with pytest.raises(ValidationError):
        container.product_service.add_product(_kilim(nombre=' '))
    with pytest.raises(ValidationError):
        container.product_service.add_product(_kilim(precio_venta=-1.0))
    with pytest.raises(NotFoundError):
        container.product_service.update_product(_kilim(id=404))


def test_round_trip_without_entry_date(container):
    product = _kilim(fecha_ingreso=None)
    product_id = container.product_service.add_product(product)

    assert product.fecha_ingreso == date.today()
    assert container.product_repo.find_by_id(product_id) == product


def test_category_created_concurrently_is_reused(container, seeded_engine, monkeypatch):
    """Otra operación insertó la categoría entre la verificación y el INSERT."""
    repo = container.category_repo
    monkeypatch.setattr(repo, 'exists', lambda nombre, conn=None: False)

    assert repo.ensure('Alfombras') is False
    assert count_rows(seeded_engine, categoria, categoria.c.nombre == 'Alfombras') == 1

    # La transacción del producto sigue siendo utilizable
    product_id = container.product_repo.create(_kilim(categoria_nombre='Alfombras'))
    assert container.product_repo.find_by_id(product_id).categoria_nombre == 'Alfombras'
