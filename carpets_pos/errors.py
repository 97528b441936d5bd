# ==============================================================================
# ERRORES DEL DOMINIO
# ==============================================================================
# Jerarquía única de excepciones. Ninguna cruza la frontera de comandos:
# los manejadores las convierten en {'status': 'error', 'mensaje': ...}.
# ==============================================================================


class BridgeError(Exception):
    """Base de todos los errores controlados de la aplicación."""

    def __init__(self, mensaje: str):
        super().__init__(mensaje)
        self.mensaje = mensaje


class TranslationError(BridgeError):
    """Argumentos del canal con forma o tipo inválido."""
    pass


class ValidationError(BridgeError):
    """Violación de una regla de negocio (stock, categoría, etc.)."""
    pass


class PersistenceError(BridgeError):
    """Fallo del almacenamiento subyacente."""
    pass


class NotFoundError(BridgeError):
    """El registro buscado no existe."""
    pass
