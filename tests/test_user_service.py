# -*- coding: utf-8 -*-
"""
Tests de autenticación: hashes werkzeug, contraseñas heredadas y login.
"""
import pytest
from werkzeug.security import check_password_hash

from carpets_pos.errors import ValidationError
from carpets_pos.services.user_service import is_password_hash


def test_login_ok(container):
    resultado = container.router.dirigir('Login', 'login', ['12345678', '1234'])
    assert resultado == {
        'status': 'ok',
        'mensaje': 'Login exitoso',
        'usuario': '12345678',
        'rol': 'admin',
    }


@pytest.mark.parametrize('dni, password', [
    ('x', 'wrong'),
    ('12345678', 'wrong'),
    ('12345678', ''),
    ('', '1234'),
])
def test_login_invalid_credentials(container, dni, password):
    resultado = container.router.dirigir('Login', 'login', [dni, password])
    assert resultado == {'status': 'error', 'mensaje': 'Credenciales inválidas'}


def test_no_master_key(container):
    """Ninguna contraseña especial abre sesión sin usuario válido."""
    for dni in ('', 'admin', 'cualquiera', '12345678'):
        resultado = container.router.dirigir('Login', 'login', [dni, 'admin123'])
        assert resultado['status'] == 'error'


def test_login_arity_and_shape(container):
    assert container.router.dirigir('Login', 'login', ['12345678'])['status'] == 'error'
    assert container.router.dirigir('Login', 'login', [None, '1234'])['status'] == 'error'


def test_legacy_plaintext_then_migration(container):
    service = container.user_service
    assert service.authenticate('87654321', 'clave') is not None
    assert service.authenticate('87654321', 'otra') is None

    assert service.migrar_passwords() == 1
    stored = container.user_repo.find_by_username('87654321').password_hash
    assert is_password_hash(stored)
    assert check_password_hash(stored, 'clave')
    assert service.authenticate('87654321', 'clave').rol == 'vendedor'

    assert service.migrar_passwords() == 0


def test_crear_usuario(container):
    service = container.user_service
    user = service.crear_usuario('  44556677 ', 'secreta', 'Administrador')
    assert user.id is not None
    assert user.nombre == '44556677'
    assert user.rol == 'admin'
    assert is_password_hash(user.password_hash)
    assert service.authenticate('44556677', 'secreta') is not None

    assert service.crear_usuario('11223344', 'x', 'cajero').rol == 'vendedor'

    with pytest.raises(ValidationError):
        service.crear_usuario('44556677', 'otra')
    with pytest.raises(ValidationError):
        service.crear_usuario('', 'otra')
    with pytest.raises(ValidationError):
        service.crear_usuario('55555555', '')
