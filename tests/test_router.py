# -*- coding: utf-8 -*-
"""
Tests del enrutador: resolución por canal, aridad y comandos completos.
"""
from datetime import date

import pytest

from carpets_pos.bridge.router import Comando, CommandRouter

from conftest import PERSA_ID, TAPETE_ID, stock_of


def _router_with(calls):
    router = CommandRouter()
    router.registrar(Comando('ping', 'Pruebas', 0, lambda: 'pong'))
    router.registrar(Comando('eco', 'Pruebas', 1, lambda x: calls.append(x) or x))
    router.registrar(Comando('suma', 'Pruebas', 2, lambda a, b: a + b))
    return router


def test_dispatch_by_arity():
    calls = []
    router = _router_with(calls)
    assert router.dirigir('Pruebas', 'ping', []) == 'pong'
    assert router.dirigir('Pruebas', 'eco', ['hola']) == 'hola'
    assert router.dirigir('Pruebas', 'suma', [2, 3]) == 5


def test_unknown_command_or_channel_is_absent():
    router = _router_with([])
    assert router.dirigir('Pruebas', 'nada', []) is None
    assert router.dirigir('Otro', 'ping', []) is None


@pytest.mark.parametrize('argumentos', [[], ['a', 'b'], ['a', 'b', 'c']])
def test_wrong_arity_is_structured_error(argumentos):
    calls = []
    router = _router_with(calls)
    resultado = router.dirigir('Pruebas', 'eco', argumentos)
    assert resultado['status'] == 'error'
    assert 'eco' in resultado['mensaje']
    assert calls == []


def test_register_rejects_duplicates_and_bad_arity():
    router = _router_with([])
    with pytest.raises(ValueError):
        router.registrar(Comando('ping', 'Pruebas', 0, lambda: None))
    with pytest.raises(ValueError):
        router.registrar(Comando('tres', 'Pruebas', 3, lambda a, b, c: None))
    # Mismo nombre en otro canal sí se permite
    router.registrar(Comando('ping', 'Otro', 0, lambda: 'otro'))
    assert router.dirigir('Otro', 'ping') == 'otro'


def test_application_commands(container):
    router = container.router
    assert router.canales() == ['Compra', 'Login', 'Productos', 'Venta']
    nombres = {(c.canal, c.nombre): c.aridad for c in router.comandos()}
    assert nombres[('Login', 'login')] == 2
    assert nombres[('Productos', 'getProduct')] == 0
    assert nombres[('Productos', 'searchProducts')] == 2
    assert nombres[('Venta', 'regVenta')] == 2
    assert nombres[('Venta', 'calcTotVent')] == 1
    assert nombres[('Compra', 'editDetCompra')] == 2
    assert len(nombres) == 24
    # Un comando solo existe en su canal
    assert router.dirigir('Productos', 'listVentas', []) is None


# =============================================================================
# ESCENARIOS DE PUNTA A PUNTA
# =============================================================================

def test_reg_venta_scenario(container, seeded_engine):
    router = container.router
    resultado = router.dirigir('Venta', 'regVenta', [
        {'clienteDni': '12345678'},
        [{'productoId': PERSA_ID, 'cantidad': 2, 'precioUnitario': 10.0}],
    ])
    assert resultado['status'] == 'ok'
    sale_id = resultado['id']

    ventas = router.dirigir('Venta', 'listVentas', [])['ventas']
    assert ventas[0]['id'] == sale_id
    assert ventas[0]['numeroBoleta'] == f"Venta #{sale_id}"
    assert ventas[0]['monto'] == pytest.approx(20.0 + 20.0 * 0.18)
    assert ventas[0]['detalles'][0]['nombre'] == 'Alfombra Persa'
    assert stock_of(seeded_engine, PERSA_ID) == 8

    boleta = router.dirigir('Venta', 'genBoletaVenta', [sale_id, []])
    assert boleta == {'status': 'ok', 'numeroBoleta': f"Venta #{sale_id}", 'total': pytest.approx(23.6)}

    assert router.dirigir('Venta', 'deleteVenta', [sale_id]) == {'status': 'ok'}
    assert stock_of(seeded_engine, PERSA_ID) == 10


def test_reg_venta_errors_are_responses(container):
    router = container.router
    resultado = router.dirigir('Venta', 'regVenta', [{'cliente': 'x'}, []])
    assert resultado['status'] == 'error'

    resultado = router.dirigir('Venta', 'regVenta', [
        {}, [{'productoId': TAPETE_ID, 'cantidad': 50, 'precioUnitario': 12}],
    ])
    assert resultado['status'] == 'error'
    assert 'Stock insuficiente' in resultado['mensaje']


def test_amount_commands(container):
    router = container.router
    assert router.dirigir('Venta', 'calcMontos', [10, 2]) == {
        'subtotal': 20.0, 'igv': pytest.approx(3.6), 'total': pytest.approx(23.6)
    }
    lines = [
        {'productoId': 1, 'cantidad': 1, 'precioUnitario': 100},
        {'productoId': 2, 'cantidad': 2, 'precioUnitario': 25},
    ]
    montos = router.dirigir('Venta', 'calcMontVentCom', [lines])
    assert montos['subtotal'] == 150.0
    assert montos['total'] == pytest.approx(177.0)
    assert router.dirigir('Venta', 'calcTotVent', [lines]) == pytest.approx(177.0)
    assert router.dirigir('Venta', 'calcMontos', ['diez', 2])['status'] == 'error'


def test_venta_por_day(container):
    router = container.router
    router.dirigir('Venta', 'regVenta', [{}, [{'productoId': PERSA_ID, 'cantidad': 1, 'precioUnitario': 100}]])
    resultado = router.dirigir('Venta', 'getVentaPorDay', [date.today().isoformat()])
    assert resultado['status'] == 'ok'
    assert len(resultado['ventas']) == 1
    assert router.dirigir('Venta', 'getVentaPorDay', ['1999-01-01'])['ventas'] == []
    assert router.dirigir('Venta', 'getVentaPorDay', ['ayer'])['status'] == 'error'


def test_product_commands(container):
    router = container.router
    productos = router.dirigir('Productos', 'getProduct', [])
    assert [p['id'] for p in productos] == [PERSA_ID, TAPETE_ID]
    assert productos[1]['salePrice'] == 10.0

    nuevo = router.dirigir('Productos', 'addProduct', [{
        'nombre': 'Pasillo Moderno', 'precioCompra': 30, 'precioVenta': 55,
        'cantidad': 4, 'categoriaNombre': 'Pasillos', 'imagePath': None,
    }])
    assert nuevo['status'] == 'ok'
    nuevo_id = nuevo['id']

    assert router.dirigir('Productos', 'ProductoExists', [nuevo_id]) is True
    producto = router.dirigir('Productos', 'getProdID', [nuevo_id])['producto']
    assert producto['categoriaNombre'] == 'Pasillos'

    producto['precioVenta'] = 60
    assert router.dirigir('Productos', 'editProduct', [producto]) == {'status': 'ok'}
    assert router.dirigir('Productos', 'getProdID', [nuevo_id])['producto']['precioVenta'] == 60.0

    assert router.dirigir('Productos', 'searchProducts', ['Pasillo', 'nombre'])[0]['id'] == nuevo_id
    assert router.dirigir('Productos', 'SearchIdNombre', ['Persa'])[0]['id'] == PERSA_ID
    assert router.dirigir('Productos', 'ValStock', [nuevo_id, 5]) == {
        'status': 'ok', 'disponible': False, 'stock': 4
    }
    assert router.dirigir('Productos', 'SumGanancia', []) == 0.0

    assert router.dirigir('Productos', 'deleteProduct', [nuevo_id]) == {'status': 'ok'}
    assert router.dirigir('Productos', 'ProductoExists', [nuevo_id]) is False
    assert router.dirigir('Productos', 'getProdID', [nuevo_id])['status'] == 'error'
    assert router.dirigir('Productos', 'deleteProduct', [nuevo_id])['status'] == 'error'


def test_add_product_with_empty_category(container):
    resultado = container.router.dirigir('Productos', 'addProduct', [{
        'nombre': 'X', 'precioCompra': 1, 'precioVenta': 2, 'cantidad': 1, 'categoriaNombre': '',
    }])
    assert resultado['status'] == 'error'


def test_purchase_commands(container, seeded_engine):
    router = container.router
    resultado = router.dirigir('Compra', 'RegCompra', [
        {'descripcion': 'Importación', 'monto': 9999},
        [{'productoId': TAPETE_ID, 'unidades': 10, 'precioUnitario': 4.5}],
    ])
    assert resultado['status'] == 'ok'
    compra_id = resultado['id']

    compras = router.dirigir('Compra', 'listCompras', [])
    assert compras == [{'id': compra_id, 'descripcion': 'Importación', 'monto': 45.0, 'imagePath': None}]

    line = container.purchase_repo.find_lines(compra_id)[0]
    assert router.dirigir('Compra', 'editDetCompra', [line.id, {'unidades': 8, 'precioUnitario': 5}]) == {'status': 'ok'}
    assert stock_of(seeded_engine, TAPETE_ID) == 11
    assert router.dirigir('Compra', 'listCompras', [])[0]['monto'] == 40.0

    assert router.dirigir('Compra', 'deleteDetCompra', [line.id]) == {'status': 'ok'}
    assert stock_of(seeded_engine, TAPETE_ID) == 3
    assert router.dirigir('Compra', 'deleteCompra', [compra_id]) == {'status': 'ok'}
    assert router.dirigir('Compra', 'deleteCompra', [compra_id])['status'] == 'error'
