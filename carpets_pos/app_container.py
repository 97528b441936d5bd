# ==============================================================================
# CONTENEDOR DE DEPENDENCIAS - Inyección de servicios
# ==============================================================================
# Este módulo proporciona una forma centralizada de obtener instancias
# del engine, repositorios, servicios, manejadores y despachador. Facilita:
#   - Inyección de dependencias (el Engine es explícito, no global)
#   - Testing (se construye alrededor de un engine SQLite en memoria)
#
# Cadena de construcción (todo perezoso):
#   Settings → Engine → Repositorios → Servicios → Manejadores → Router
#            → Dispatcher
# ==============================================================================

import logging
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from carpets_pos.config import Settings

# ═══════════════════════════════════════════════════════════════════════════════
# REPOSITORIOS - Capa de persistencia (MySQL vía SQLAlchemy)
# ═══════════════════════════════════════════════════════════════════════════════
from carpets_pos.repositories import (
    CategoryRepository,
    ProductRepository,
    PurchaseRepository,
    SaleRepository,
    UserRepository,
)

# ═══════════════════════════════════════════════════════════════════════════════
# SERVICIOS - Capa de lógica de negocio
# ═══════════════════════════════════════════════════════════════════════════════
from carpets_pos.services import (
    ProductService,
    PurchaseService,
    SaleService,
    UserService,
)

# ═══════════════════════════════════════════════════════════════════════════════
# PUENTE - Manejadores, enrutador y despachador
# ═══════════════════════════════════════════════════════════════════════════════
from carpets_pos.bridge import (
    CommandDispatcher,
    CommandRouter,
    LoginHandlers,
    ProductHandlers,
    PurchaseHandlers,
    SaleHandlers,
    build_router,
)

logger = logging.getLogger(__name__)


class AppContainer:
    """
    Contenedor de dependencias de la aplicación.

    Implementa el patrón Singleton para asegurar una única instancia
    de cada repositorio y servicio.

    Uso:
        container = AppContainer(Settings.from_env())
        resultado = container.dispatcher.call('Venta', 'listVentas', [])

    En tests:
        AppContainer.reset_instance()
        container = AppContainer(settings, engine=engine_en_memoria)
    """

    _instance: Optional['AppContainer'] = None

    def __new__(cls, settings: Settings = None, engine: Engine = None):
        """Singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, settings: Settings = None, engine: Engine = None):
        """
        Inicializa el contenedor.

        Args:
            settings: Configuración (por defecto, desde variables de entorno)
            engine: Engine ya creado (si no se pasa, se crea desde settings)
        """
        if self._initialized:
            return

        self.settings = settings or Settings.from_env()
        self._engine: Optional[Engine] = engine
        self._owns_engine = engine is None

        # Repositorios (lazy loading)
        self._category_repo: Optional[CategoryRepository] = None
        self._product_repo: Optional[ProductRepository] = None
        self._sale_repo: Optional[SaleRepository] = None
        self._purchase_repo: Optional[PurchaseRepository] = None
        self._user_repo: Optional[UserRepository] = None

        # Servicios (lazy loading)
        self._user_service: Optional[UserService] = None
        self._product_service: Optional[ProductService] = None
        self._sale_service: Optional[SaleService] = None
        self._purchase_service: Optional[PurchaseService] = None

        # Puente (lazy loading)
        self._router: Optional[CommandRouter] = None
        self._dispatcher: Optional[CommandDispatcher] = None

        self._initialized = True

    # =========================================================================
    # BASE DE DATOS
    # =========================================================================

    @property
    def engine(self) -> Engine:
        """Engine de SQLAlchemy (pool con pre-ping)."""
        if self._engine is None:
            self._engine = create_engine(
                self.settings.database_url,
                pool_pre_ping=True,
                echo=self.settings.sql_echo,
            )
            self._owns_engine = True
            logger.info(
                "Engine creado: %s",
                self._engine.url.render_as_string(hide_password=True)
            )
        return self._engine

    # =========================================================================
    # REPOSITORIOS
    # =========================================================================

    @property
    def category_repo(self) -> CategoryRepository:
        """Repositorio de categorías (singleton)."""
        if self._category_repo is None:
            self._category_repo = CategoryRepository(self.engine)
        return self._category_repo

    @property
    def product_repo(self) -> ProductRepository:
        """Repositorio de productos (singleton)."""
        if self._product_repo is None:
            self._product_repo = ProductRepository(self.engine, self.category_repo)
        return self._product_repo

    @property
    def sale_repo(self) -> SaleRepository:
        """Repositorio de ventas (singleton)."""
        if self._sale_repo is None:
            self._sale_repo = SaleRepository(self.engine)
        return self._sale_repo

    @property
    def purchase_repo(self) -> PurchaseRepository:
        """Repositorio de compras (singleton)."""
        if self._purchase_repo is None:
            self._purchase_repo = PurchaseRepository(self.engine)
        return self._purchase_repo

    @property
    def user_repo(self) -> UserRepository:
        """Repositorio de usuarios (singleton)."""
        if self._user_repo is None:
            self._user_repo = UserRepository(self.engine)
        return self._user_repo

    # =========================================================================
    # SERVICIOS
    # =========================================================================

    @property
    def user_service(self) -> UserService:
        """Servicio de usuarios (singleton)."""
        if self._user_service is None:
            self._user_service = UserService(self.user_repo)
        return self._user_service

    @property
    def product_service(self) -> ProductService:
        """Servicio de productos (singleton)."""
        if self._product_service is None:
            self._product_service = ProductService(self.product_repo)
        return self._product_service

    @property
    def sale_service(self) -> SaleService:
        """Servicio de ventas (singleton)."""
        if self._sale_service is None:
            self._sale_service = SaleService(
                self.sale_repo,
                self.product_repo,
                tax_rate=self.settings.tax_rate
            )
        return self._sale_service

    @property
    def purchase_service(self) -> PurchaseService:
        """Servicio de compras (singleton)."""
        if self._purchase_service is None:
            self._purchase_service = PurchaseService(self.purchase_repo, self.product_repo)
        return self._purchase_service

    # =========================================================================
    # PUENTE
    # =========================================================================

    @property
    def router(self) -> CommandRouter:
        """Enrutador con todos los comandos registrados (singleton)."""
        if self._router is None:
            self._router = build_router(
                LoginHandlers(self.user_service),
                ProductHandlers(self.product_service),
                SaleHandlers(self.sale_service),
                PurchaseHandlers(self.purchase_service),
            )
        return self._router

    @property
    def dispatcher(self) -> CommandDispatcher:
        """Despachador en pool de hilos (singleton)."""
        if self._dispatcher is None:
            self._dispatcher = CommandDispatcher(self.router, workers=self.settings.workers)
        return self._dispatcher

    # =========================================================================
    # UTILIDADES
    # =========================================================================

    def ping(self) -> bool:
        """Verifica que la base de datos responda."""
        return self.user_repo.ping()

    def reset(self) -> None:
        """
        Reinicia todas las instancias.
        Detiene el despachador y libera el engine si lo creó el contenedor.
        """
        if self._dispatcher is not None:
            self._dispatcher.shutdown(wait=True)
        if self._engine is not None and self._owns_engine:
            self._engine.dispose()
            self._engine = None

        self._category_repo = None
        self._product_repo = None
        self._sale_repo = None
        self._purchase_repo = None
        self._user_repo = None

        self._user_service = None
        self._product_service = None
        self._sale_service = None
        self._purchase_service = None

        self._router = None
        self._dispatcher = None

    @classmethod
    def get_instance(cls, settings: Settings = None) -> 'AppContainer':
        """
        Obtiene la instancia singleton del contenedor.

        Args:
            settings: Configuración (solo se usa en la primera llamada)

        Returns:
            Instancia del contenedor
        """
        if cls._instance is None:
            return cls(settings)
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Elimina la instancia singleton (útil para tests)."""
        if cls._instance is not None:
            cls._instance.reset()
            cls._instance = None


# Función helper para obtener el contenedor global
def get_container(settings: Settings = None) -> AppContainer:
    """
    Obtiene el contenedor de dependencias global.

    Args:
        settings: Configuración de la aplicación

    Returns:
        Instancia del contenedor
    """
    return AppContainer.get_instance(settings)
