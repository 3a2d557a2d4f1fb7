"""Orquestrador do Guia Turístico"""
from typing import Any, Callable, Optional

from ...infrastructure.config.settings import Settings
from ...shared.cache.lru_cache import LRUCache
from ...shared.exceptions.errors import ConfigurationError
from ...shared.http.client import HTTPClient
from ...shared.http.rate_limiter import RateLimiter
from ...shared.logging.config import get_logger
from ...shared.observer.subject import ObserverSubject
from ..geocoding.domain.models import BrazilianStandardAddress
from ..geocoding.providers.cache_fetch_manager import CacheFetchManager
from ..geocoding.providers.nominatim_fetch_manager import NominatimFetchManager
from ..geocoding.services.address_data_extractor import AddressDataExtractor
from ..geocoding.services.change_detection_coordinator import ChangeDetectionCoordinator
from ..geocoding.services.reverse_geocoder import ReverseGeocoder
from ..notifications.providers.console_notifier import ConsoleNotifier
from ..notifications.services.address_announcer import AddressAnnouncer, Notifier
from ..positioning.domain.models import GeolocationOptions, Position, PositionEvent
from ..positioning.providers.base import GeolocationProvider
from ..positioning.services.geocoding_state import GeocodingState
from ..positioning.services.geolocation_service import GeolocationService
from ..positioning.services.position_manager import PositionManager

logger = get_logger(__name__)

_ACCEPTED_EVENTS = (PositionEvent.CURRENT_POSITION_UPDATE, PositionEvent.IMMEDIATE_ADDRESS_UPDATE)


class GuiaOrchestrator:
    """
    Orquestrador

    Cria os componentes a partir de Settings, faz a injeção de
    dependências e liga o fluxo:
    provedor → GeolocationService → PositionManager → ReverseGeocoder →
    AddressDataExtractor → ChangeDetectionCoordinator → anúncios
    """

    def __init__(
        self,
        settings: Settings,
        provider: Optional[GeolocationProvider] = None,
        fetch_manager: Any = None,
        notifier: Optional[Notifier] = None,
        error_reporter: Optional[Callable[[str], Any]] = None,
    ) -> None:
        """
        Args:
            settings: configuração da aplicação
            provider: provedor de geolocalização (None: apenas geocodificação direta)
            fetch_manager: fetch manager (padrão: Nominatim, com cache conforme settings)
            notifier: destino dos anúncios (padrão: ConsoleNotifier)
            error_reporter: recebe mensagens de erro para o usuário
        """
        self.settings = settings

        # Transporte HTTP
        self.http_client = HTTPClient(
            timeout=settings.http_timeout,
            max_retries=settings.http_max_retries,
            user_agent=settings.nominatim_user_agent,
        )
        self.rate_limiter = RateLimiter(requests_per_second=settings.nominatim_requests_per_second)
        self.fetch_manager = fetch_manager if fetch_manager is not None else self._create_fetch_manager()

        # Posicionamento
        self.position_manager = PositionManager(
            tracking_interval_ms=settings.tracking_interval_ms,
            minimum_distance_change=settings.minimum_distance_change,
            not_accepted_accuracy=settings.get_not_accepted_accuracy(),
        )
        self.geocoding_state = GeocodingState()
        self.geolocation_service: Optional[GeolocationService] = None
        if provider is not None:
            self.geolocation_service = GeolocationService(
                provider=provider,
                position_manager=self.position_manager,
                options=GeolocationOptions(
                    enable_high_accuracy=settings.geolocation_high_accuracy,
                    timeout_ms=settings.geolocation_timeout_ms,
                    maximum_age_ms=settings.geolocation_maximum_age_ms,
                ),
            )

        # Geocodificação
        self.address_data_extractor = AddressDataExtractor(
            cache=LRUCache(
                max_size=settings.address_cache_size,
                expiration_seconds=settings.address_cache_expiration_seconds,
            ),
            cleanup_interval=settings.address_cache_cleanup_interval_seconds,
        )
        self.reverse_geocoder = ReverseGeocoder(
            self.fetch_manager,
            address_data_extractor=self.address_data_extractor,
            base_url=settings.nominatim_base_url,
            cors_proxy=settings.cors_proxy,
            enable_cors_fallback=settings.enable_cors_fallback,
            discard_stale_responses=settings.discard_stale_responses,
            error_reporter=error_reporter,
            http_client=self.http_client,
        )
        self.change_observers = ObserverSubject()
        self.change_detection_coordinator = ChangeDetectionCoordinator(
            self.reverse_geocoder, self.change_observers
        )
        self.change_detection_coordinator.set_address_data_extractor(self.address_data_extractor)
        self.change_detection_coordinator.setup_change_detection()

        # Anúncios
        self.announcer: Optional[AddressAnnouncer] = None
        if settings.announcements_enabled:
            self.announcer = AddressAnnouncer(notifier or ConsoleNotifier())
            self.reverse_geocoder.subscribe(self.announcer)
            self.change_observers.subscribe(self.announcer)

        self.position_manager.subscribe(self.reverse_geocoder)
        self.position_manager.subscribe_function(self._on_position_event)

        logger.info("GuiaOrchestrator initialized")

    def _create_fetch_manager(self) -> Any:
        nominatim = NominatimFetchManager(self.http_client, self.rate_limiter)
        if self.settings.response_cache_enabled:
            return CacheFetchManager(nominatim)
        return nominatim

    def _on_position_event(
        self, position_manager: PositionManager, event: PositionEvent, data: Any, issue: Any
    ) -> None:
        if event not in _ACCEPTED_EVENTS:
            return
        self.geocoding_state.set_position(position_manager.last_position)
        self.change_detection_coordinator.set_current_position(position_manager.last_position)

    def _require_geolocation_service(self) -> GeolocationService:
        if self.geolocation_service is None:
            raise ConfigurationError("No geolocation provider configured")
        return self.geolocation_service

    async def locate_once(self) -> Position:
        """
        Obtém uma posição e aguarda a geocodificação que ela disparar

        Returns:
            posição entregue pelo provedor
        """
        position = await self._require_geolocation_service().get_single_location_update()
        await self.reverse_geocoder.wait_pending()
        return position

    async def geocode(self, latitude: float, longitude: float) -> Optional[BrazilianStandardAddress]:
        """
        Geocodificação reversa direta de um par de coordenadas

        Returns:
            endereço padronizado
        """
        self.reverse_geocoder.set_coordinates(latitude, longitude)
        await self.reverse_geocoder.fetch_address()
        return self.reverse_geocoder.standardized_address

    def start_tracking(self) -> Optional[int]:
        """
        Inicia o acompanhamento contínuo e a limpeza periódica do cache

        Deve ser chamado com o event loop em execução.

        Returns:
            identificador do watch
        """
        self.address_data_extractor.start_cleanup_task()
        return self._require_geolocation_service().watch_current_location()

    def stop_tracking(self) -> None:
        if self.geolocation_service is not None:
            self.geolocation_service.stop_watching()

    async def aclose(self) -> None:
        """Encerra o acompanhamento, aguarda buscas pendentes e libera recursos"""
        if self.geolocation_service is not None and self.geolocation_service.is_watching:
            self.geolocation_service.stop_watching()

        await self.reverse_geocoder.wait_pending()
        if self.announcer is not None:
            self.announcer.flush()

        self.change_detection_coordinator.remove_all_change_detection()
        self.address_data_extractor.close()

        close = getattr(self.fetch_manager, "close", None)
        if callable(close):
            close()
        self.http_client.close()

        logger.info("GuiaOrchestrator closed")

    async def __aenter__(self) -> "GuiaOrchestrator":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()
