# ==============================================================================
# SISTEMA DE PROFILING INTERNO
# ==============================================================================
# Mide rendimiento de comandos y rutas sin afectar la respuesta al cliente.
# Los registros van al logger "carpets_pos.performance" (misma configuración
# de logging que el resto de la aplicación).
#
# ACTIVAR/DESACTIVAR: set_enabled() o CARPETS_ENABLE_PROFILING
# ==============================================================================

import logging
import threading
import time
from collections import defaultdict
from functools import wraps

logger = logging.getLogger('carpets_pos.performance')

# ═══════════════════════════════════════════════════════════════════════════
# CONFIGURACIÓN
# ═══════════════════════════════════════════════════════════════════════════

_enabled = True

# Umbrales de tiempo (en milisegundos)
THRESHOLD_WARNING = 300   # Advertencia si supera 300ms
THRESHOLD_CRITICAL = 700  # Crítico si supera 700ms

# Nombres legibles de las rutas HTTP
ROUTE_NAMES = {
    'POST /canal/<canal>/<metodo>': 'Invocar comando',
    'GET /salud': 'Verificar salud',
}


def set_enabled(enabled: bool) -> None:
    """Activa o desactiva la medición (afecta a funciones ya decoradas)."""
    global _enabled
    _enabled = bool(enabled)


def is_enabled() -> bool:
    return _enabled


# ═══════════════════════════════════════════════════════════════════════════
# ESTADÍSTICAS DE FUNCIONES (en memoria)
# ═══════════════════════════════════════════════════════════════════════════

# Estructura: {nombre_funcion: {calls: int, total_time: float, max_time: float}}
_function_stats = defaultdict(lambda: {'calls': 0, 'total_time': 0.0, 'max_time': 0.0})
_stats_lock = threading.Lock()


def _get_route_name(method, rule):
    """Nombre legible de una ruta; si no está mapeada, la ruta cruda."""
    key = f"{method} {rule}"
    return ROUTE_NAMES.get(key, key)


def _log_slow(kind, name, time_ms):
    """Registra una llamada lenta con el nivel según el umbral superado."""
    if time_ms >= THRESHOLD_CRITICAL:
        logger.critical("%s MUY LENTA: %s (%.0f ms, umbral %d ms)", kind, name, time_ms, THRESHOLD_CRITICAL)
    elif time_ms >= THRESHOLD_WARNING:
        logger.warning("%s LENTA: %s (%.0f ms, umbral %d ms)", kind, name, time_ms, THRESHOLD_WARNING)


# ═══════════════════════════════════════════════════════════════════════════
# 1️⃣ HOOKS PARA FLASK (before/after request)
# ═══════════════════════════════════════════════════════════════════════════

def init_profiling(app):
    """
    Inicializa el profiling de rutas en una app Flask.
    Registra hooks before_request y after_request.

    Uso:
        from carpets_pos.performance_logger import init_profiling
        init_profiling(app)
    """
    from flask import g, request

    @app.before_request
    def _start_timer():
        g.start_time = time.perf_counter()

    @app.after_request
    def _log_request(response):
        if not _enabled or not hasattr(g, 'start_time'):
            return response

        elapsed = (time.perf_counter() - g.start_time) * 1000  # ms
        rule = str(request.url_rule) if request.url_rule else request.path
        action_name = _get_route_name(request.method, rule)

        logger.debug(
            "%s: %s %s → %s (%.0f ms)",
            action_name, request.method, request.path, response.status_code, elapsed
        )
        _log_slow('Ruta', f"{action_name} ({request.path})", elapsed)
        return response


# ═══════════════════════════════════════════════════════════════════════════
# 2️⃣ DECORADOR PARA FUNCIONES CLAVE
# ═══════════════════════════════════════════════════════════════════════════

def profile_function(func=None, name=None):
    """
    Decorador para medir rendimiento de funciones críticas.

    Uso:
        @profile_function
        def mi_funcion():
            ...

        @profile_function(name="Registrar venta")
        def reg_venta():
            ...

    Registra:
        - Cantidad de llamadas
        - Tiempo promedio
        - Tiempo máximo
    """
    def decorator(fn):
        func_name = name or fn.__name__

        @wraps(fn)
        def wrapper(*args, **kwargs):
            if not _enabled:
                return fn(*args, **kwargs)
            start = time.perf_counter()
            try:
                return fn(*args, **kwargs)
            finally:
                elapsed_ms = (time.perf_counter() - start) * 1000

                with _stats_lock:
                    stats = _function_stats[func_name]
                    stats['calls'] += 1
                    stats['total_time'] += elapsed_ms
                    if elapsed_ms > stats['max_time']:
                        stats['max_time'] = elapsed_ms

                _log_slow('Función', func_name, elapsed_ms)

        return wrapper

    # Permitir uso sin paréntesis: @profile_function
    if func is not None:
        return decorator(func)
    return decorator


# ═══════════════════════════════════════════════════════════════════════════
# 3️⃣ REPORTE DE ESTADÍSTICAS
# ═══════════════════════════════════════════════════════════════════════════

def get_function_stats():
    """
    Obtiene estadísticas de todas las funciones perfiladas.

    Returns:
        dict: {nombre: {calls, avg_time, max_time}}
    """
    with _stats_lock:
        result = {}
        for func_name, stats in _function_stats.items():
            calls = stats['calls']
            avg = stats['total_time'] / calls if calls > 0 else 0
            result[func_name] = {
                'calls': calls,
                'avg_time': round(avg, 2),
                'max_time': round(stats['max_time'], 2)
            }
        return result


def log_function_stats_report():
    """Escribe en el log un resumen ordenado por tiempo promedio."""
    stats = get_function_stats()
    if not stats:
        return

    sorted_stats = sorted(stats.items(), key=lambda x: x[1]['avg_time'], reverse=True)
    for func_name, data in sorted_stats:
        logger.info(
            "%s: %d llamadas, promedio %.0f ms, máximo %.0f ms",
            func_name, data['calls'], data['avg_time'], data['max_time']
        )


def reset_stats():
    """Reinicia todas las estadísticas (útil para testing)"""
    with _stats_lock:
        _function_stats.clear()


__all__ = [
    'init_profiling',
    'profile_function',
    'get_function_stats',
    'log_function_stats_report',
    'reset_stats',
    'set_enabled',
    'is_enabled',
]
