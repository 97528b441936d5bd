# -*- coding: utf-8 -*-
"""
Tests de ventas: montos con IGV, registro atómico, stock y anulación.
"""
from datetime import date, timedelta

import pytest

from carpets_pos.errors import NotFoundError, ValidationError
from carpets_pos.models import Sale, SaleLine
from carpets_pos.repositories.schema import detalle_venta, venta
from carpets_pos.services.sale_service import calcular_montos, calcular_montos_linea

from conftest import PERSA_ID, TAPETE_ID, count_rows, stock_of


# =============================================================================
# MONTOS
# =============================================================================

def test_calcular_montos_single_line():
    amounts = calcular_montos([SaleLine(producto_id=1, cantidad=2, precio_unitario=10.0)], 0.18)
    assert amounts.subtotal == 20.0
    assert amounts.igv == pytest.approx(3.6)
    assert amounts.total == pytest.approx(23.6)


@pytest.mark.parametrize('rate', [0.0, 0.18, 0.1])
def test_total_is_subtotal_times_one_plus_rate(rate):
    lines = [
        SaleLine(producto_id=1, cantidad=3, precio_unitario=19.9),
        SaleLine(producto_id=2, cantidad=1, precio_unitario=7.35),
        SaleLine(producto_id=3, cantidad=5, precio_unitario=0.99),
    ]
    expected = sum(l.precio_unitario * l.cantidad for l in lines) * (1 + rate)
    amounts = calcular_montos(lines, rate)
    assert amounts.total == pytest.approx(expected, abs=0.01)
    assert amounts.total == pytest.approx(amounts.subtotal + amounts.igv)


def test_calcular_montos_empty():
    amounts = calcular_montos([], 0.18)
    assert (amounts.subtotal, amounts.igv, amounts.total) == (0.0, 0.0, 0.0)


def test_calcular_montos_linea():
    amounts = calcular_montos_linea(12.5, 4, 0.18)
    assert amounts.subtotal == 50.0
    assert amounts.igv == 9.0
    assert amounts.total == 59.0


# =============================================================================
# REGISTRO
# =============================================================================

def test_registrar_venta(container, seeded_engine):
    service = container.sale_service
    sale_id = service.registrar_venta(
        Sale(cliente_dni='12345678'),
        [SaleLine(producto_id=PERSA_ID, cantidad=2, precio_unitario=10.0)],
    )

    sale = container.sale_repo.find_by_id(sale_id)
    assert sale.numero_boleta == f"Venta #{sale_id}"
    assert sale.monto == pytest.approx(23.6)
    assert sale.cliente_dni == '12345678'
    assert sale.fecha is not None
    assert len(sale.lines) == 1
    assert count_rows(seeded_engine, detalle_venta, detalle_venta.c.idventa == sale_id) == 1
    assert stock_of(seeded_engine, PERSA_ID) == 8


def test_registrar_venta_same_product_twice(container, seeded_engine):
    container.sale_service.registrar_venta(Sale(), [
        SaleLine(producto_id=TAPETE_ID, cantidad=1, precio_unitario=12.0),
        SaleLine(producto_id=TAPETE_ID, cantidad=2, precio_unitario=12.0),
    ])
    assert stock_of(seeded_engine, TAPETE_ID) == 0


def test_insufficient_stock_saves_nothing(container, seeded_engine):
    with pytest.raises(ValidationError) as excinfo:
        container.sale_service.registrar_venta(Sale(), [
            SaleLine(producto_id=PERSA_ID, cantidad=1, precio_unitario=100.0),
            SaleLine(producto_id=TAPETE_ID, cantidad=4, precio_unitario=12.0),
        ])
    assert 'Stock insuficiente' in excinfo.value.mensaje
    assert count_rows(seeded_engine, venta) == 0
    assert count_rows(seeded_engine, detalle_venta) == 0
    assert stock_of(seeded_engine, PERSA_ID) == 10


def test_unknown_product(container, seeded_engine):
    with pytest.raises(NotFoundError):
        container.sale_service.registrar_venta(
            Sale(), [SaleLine(producto_id=404, cantidad=1, precio_unitario=1.0)]
        )
    assert count_rows(seeded_engine, venta) == 0


@pytest.mark.parametrize('lines', [
    [],
    [SaleLine(producto_id=PERSA_ID, cantidad=0, precio_unitario=1.0)],
    [SaleLine(producto_id=PERSA_ID, cantidad=1, precio_unitario=-1.0)],
])
def test_invalid_lines(container, lines):
    with pytest.raises(ValidationError):
        container.sale_service.registrar_venta(Sale(), lines)


def test_failure_after_insert_rolls_back(container, seeded_engine, monkeypatch):
    """Si falla el descuento de stock, cabecera y líneas tampoco quedan."""
    repo = container.product_repo
    original = repo.adjust_stock

    def adjust_stock(product_id, delta, conn=None):
        if product_id == TAPETE_ID:
            return False
        return original(product_id, delta, conn)

    monkeypatch.setattr(repo, 'adjust_stock', adjust_stock)

    with pytest.raises(ValidationError):
        container.sale_service.registrar_venta(Sale(), [
            SaleLine(producto_id=PERSA_ID, cantidad=2, precio_unitario=100.0),
            SaleLine(producto_id=TAPETE_ID, cantidad=1, precio_unitario=12.0),
        ])

    assert count_rows(seeded_engine, venta) == 0
    assert count_rows(seeded_engine, detalle_venta) == 0
    assert stock_of(seeded_engine, PERSA_ID) == 10


# =============================================================================
# CONSULTAS Y ANULACIÓN
# =============================================================================

def test_listar_ventas_includes_products(container):
    service = container.sale_service
    first = service.registrar_venta(Sale(), [SaleLine(producto_id=PERSA_ID, cantidad=1, precio_unitario=100.0)])
    second = service.registrar_venta(Sale(), [SaleLine(producto_id=TAPETE_ID, cantidad=1, precio_unitario=12.0)])

    sales, products = service.listar_ventas()
    assert [s.id for s in sales] == [second, first]
    assert set(products) == {PERSA_ID, TAPETE_ID}


def test_ventas_por_dia(container):
    service = container.sale_service
    sale_id = service.registrar_venta(Sale(), [SaleLine(producto_id=PERSA_ID, cantidad=1, precio_unitario=100.0)])

    sales, _ = service.ventas_por_dia(date.today())
    assert [s.id for s in sales] == [sale_id]

    sales, _ = service.ventas_por_dia(date.today() - timedelta(days=1))
    assert sales == []


def test_eliminar_venta_restores_stock(container, seeded_engine):
    service = container.sale_service
    sale_id = service.registrar_venta(Sale(), [SaleLine(producto_id=PERSA_ID, cantidad=4, precio_unitario=100.0)])
    assert stock_of(seeded_engine, PERSA_ID) == 6

    service.eliminar_venta(sale_id)
    assert stock_of(seeded_engine, PERSA_ID) == 10
    assert count_rows(seeded_engine, venta) == 0
    assert count_rows(seeded_engine, detalle_venta) == 0

    with pytest.raises(NotFoundError):
        service.eliminar_venta(sale_id)


def test_generar_boleta_uses_persisted_lines(container):
    service = container.sale_service
    sale_id = service.registrar_venta(Sale(), [SaleLine(producto_id=PERSA_ID, cantidad=2, precio_unitario=10.0)])

    receipt = service.generar_boleta(sale_id, [])
    assert receipt.sale.numero_boleta == f"Venta #{sale_id}"
    assert receipt.amounts.total == pytest.approx(23.6)

    receipt = service.generar_boleta(sale_id, [SaleLine(producto_id=PERSA_ID, cantidad=1, precio_unitario=10.0)])
    assert receipt.amounts.total == pytest.approx(11.8)

    with pytest.raises(NotFoundError):
        service.generar_boleta(999)


def test_total_matches_stored_line_prices(container):
    """El precio se redondea a céntimos antes de calcular, igual que DECIMAL(10,2)."""
    assert calcular_montos([SaleLine(producto_id=PERSA_ID, cantidad=8, precio_unitario=0.125)]).total == 1.23

    sale_id = container.sale_service.registrar_venta(
        Sale(), [SaleLine(producto_id=PERSA_ID, cantidad=8, precio_unitario=0.125)]
    )
    sale = container.sale_repo.find_by_id(sale_id)
    assert sale.lines[0].precio_unitario == 0.13
    assert sale.monto == pytest.approx(1.23)
    assert sale.monto == pytest.approx(calcular_montos(sale.lines).total)
