# ==============================================================================
# APLICACIÓN FLASK - Transporte HTTP de los canales
# ==============================================================================
# La interfaz multiplataforma invoca los comandos por HTTP:
#
#   POST /canal/<canal>/<metodo>    {"argumentos": [...]}
#        → 200 {"resultado": ...}
#        → 404 {"resultado": null}        comando desconocido
#        → 400 {"resultado": {error}}     cuerpo inválido
#
#   GET  /salud  → 200 {"status": "ok"} | 503 {"status": "error", ...}
#
# Comandos de consola (flask --app wsgi <comando>):
#   crear-esquema, crear-usuario, migrar-passwords
# ==============================================================================

import logging

import click
from flask import Flask, jsonify, request

from carpets_pos.app_container import AppContainer, get_container
from carpets_pos.bridge.translators import error_response
from carpets_pos.errors import BridgeError, PersistenceError
from carpets_pos.performance_logger import init_profiling, set_enabled
from carpets_pos.repositories import crear_esquema

logger = logging.getLogger(__name__)


def create_app(container: AppContainer = None) -> Flask:
    """
    Crea la aplicación Flask.

    Args:
        container: Contenedor de dependencias (por defecto, el global)

    Returns:
        Aplicación lista para servir
    """
    container = container or get_container()

    app = Flask(__name__)
    app.json.ensure_ascii = False
    app.extensions['carpets_pos'] = container

    # ═══════════════════════════════════════════════════════════════════════
    # PROFILING
    # ═══════════════════════════════════════════════════════════════════════
    set_enabled(container.settings.enable_profiling)
    init_profiling(app)

    # ═══════════════════════════════════════════════════════════════════════
    # RUTAS
    # ═══════════════════════════════════════════════════════════════════════

    @app.route('/canal/<canal>/<metodo>', methods=['POST'])
    def invocar(canal, metodo):
        if request.get_data(cache=True):
            body = request.get_json(silent=True)
            if not isinstance(body, dict):
                return jsonify(resultado=error_response("El cuerpo debe ser un objeto JSON")), 400
        else:
            body = {}

        argumentos = body.get('argumentos', [])
        if argumentos is None:
            argumentos = []
        if not isinstance(argumentos, list):
            return jsonify(resultado=error_response("'argumentos' debe ser una lista")), 400

        if container.router.resolver(canal, metodo) is None:
            logger.warning("Comando desconocido por HTTP: %s.%s", canal, metodo)
            return jsonify(resultado=None), 404

        resultado = container.dispatcher.call(canal, metodo, argumentos)
        return jsonify(resultado=resultado)

    @app.route('/salud', methods=['GET'])
    def salud():
        try:
            container.ping()
        except PersistenceError as exc:
            return jsonify(error_response(exc.mensaje)), 503
        return jsonify(status='ok')

    # ═══════════════════════════════════════════════════════════════════════
    # COMANDOS DE CONSOLA
    # ═══════════════════════════════════════════════════════════════════════

    @app.cli.command('crear-esquema')
    def crear_esquema_command():
        """Crea las tablas que falten en la base configurada."""
        crear_esquema(container.engine)
        click.echo("Esquema listo")

    @app.cli.command('crear-usuario')
    @click.argument('nombre')
    @click.password_option()
    @click.option('--rol', default='vendedor', show_default=True)
    def crear_usuario_command(nombre, password, rol):
        """Crea un usuario con la contraseña hasheada."""
        try:
            user = container.user_service.crear_usuario(nombre, password, rol)
        except BridgeError as exc:
            raise click.ClickException(exc.mensaje)
        click.echo(f"Usuario {user.nombre} creado ({user.rol})")

    @app.cli.command('migrar-passwords')
    def migrar_passwords_command():
        """Convierte a hash las contraseñas heredadas en texto plano."""
        migrados = container.user_service.migrar_passwords()
        click.echo(f"Usuarios migrados: {migrados}")

    return app
