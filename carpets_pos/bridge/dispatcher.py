# ==============================================================================
# DESPACHADOR DE COMANDOS
# ==============================================================================
# Cada comando entrante corre en un hilo de un pool acotado; el hilo del
# llamador nunca se bloquea. El resultado vuelve por un Future o por un
# callback opcional.
#
# Cualquier excepción inesperada de un manejador se convierte, en el mismo
# hilo de trabajo, en {'status': 'error', 'mensaje': 'Error interno: ...'}.
# El llamador SIEMPRE recibe un valor. No hay cancelación.
# ==============================================================================

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional, Sequence

from carpets_pos.bridge.router import CommandRouter
from carpets_pos.bridge.translators import error_response

logger = logging.getLogger(__name__)


class CommandDispatcher:
    """
    Ejecuta comandos del enrutador en un pool de hilos.

    Uso:
        dispatcher = CommandDispatcher(router, workers=4)
        future = dispatcher.submit('Venta', 'listVentas', [])
        resultado = future.result()
    """

    def __init__(self, router: CommandRouter, workers: int = 4):
        """
        Inicializa el despachador.

        Args:
            router: Enrutador con los comandos registrados
            workers: Cantidad máxima de hilos
        """
        self.router = router
        self.workers = workers
        self._executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix='comando')

    def _run(self, canal: str, nombre: str, argumentos: Sequence[Any]) -> Any:
        try:
            return self.router.dirigir(canal, nombre, argumentos)
        except Exception as exc:
            logger.exception("Error inesperado en %s.%s", canal, nombre)
            return error_response(f"Error interno: {exc}")

    def submit(
        self,
        canal: str,
        nombre: str,
        argumentos: Sequence[Any] = (),
        callback: Optional[Callable[[Any], None]] = None
    ) -> 'Future[Any]':
        """
        Encola un comando.

        Args:
            canal: Canal de origen
            nombre: Nombre del comando
            argumentos: Argumentos posicionales
            callback: Función que recibe el resultado al terminar (opcional)

        Returns:
            Future con el resultado del comando
        """
        future = self._executor.submit(self._run, canal, nombre, list(argumentos or []))
        if callback is not None:
            def _entregar(done: 'Future[Any]') -> None:
                try:
                    callback(done.result())
                except Exception:
                    logger.exception("El callback de %s.%s falló", canal, nombre)
            future.add_done_callback(_entregar)
        return future

    def call(self, canal: str, nombre: str, argumentos: Sequence[Any] = (), timeout: float = None) -> Any:
        """Encola un comando y espera su resultado."""
        return self.submit(canal, nombre, argumentos).result(timeout=timeout)

    def shutdown(self, wait: bool = True) -> None:
        """Detiene el pool (espera los comandos en curso por defecto)."""
        self._executor.shutdown(wait=wait)
