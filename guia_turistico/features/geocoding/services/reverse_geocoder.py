"""Geocodificação reversa: posição para endereço padronizado"""
import asyncio
import inspect
from typing import Any, Callable, Optional
from urllib.parse import quote, urlencode

from ....shared.exceptions.errors import InvalidCoordinatesError, NetworkError
from ....shared.http.client import HTTPClient
from ....shared.logging.config import get_logger
from ....shared.observer.subject import Observer, ObserverSubject
from ...positioning.domain.models import PositionEvent
from ..domain.enums import ADDRESS_FETCH_FAILED_EVENT, ADDRESS_FETCHED_EVENT
from ..domain.models import BrazilianStandardAddress
from .address_data_extractor import AddressDataExtractor
from .address_extractor import standardize_address

logger = get_logger(__name__)

NOMINATIM_REVERSE_URL = "https://nominatim.openstreetmap.org/reverse"
DEFAULT_CORS_PROXY = "https://api.allorigins.win/raw?url="

NETWORK_ERROR_MESSAGE = "Não foi possível acessar o serviço de geocodificação."
RATE_LIMIT_MESSAGE = "Limite de requisições atingido. Aguarde alguns segundos e tente novamente."
TOO_EARLY_MESSAGE = "Serviço temporariamente indisponível. Tente novamente em alguns segundos."
DEFAULT_FETCH_ERROR_MESSAGE = "Falha ao buscar endereço"


def build_reverse_url(base_url: str, latitude: float, longitude: float) -> str:
    """URL de geocodificação reversa do Nominatim"""
    params = {
        "format": "json",
        "lat": latitude,
        "lon": longitude,
        "zoom": 18,
        "addressdetails": 1,
    }
    separator = "&" if "?" in base_url else "?"
    return f"{base_url}{separator}{urlencode(params)}"


def is_network_error(error: BaseException) -> bool:
    """Falha de acesso ao serviço (rede ou bloqueio CORS)"""
    text = str(error)
    return isinstance(error, NetworkError) or "CORS" in text or "Failed to fetch" in text


def classify_fetch_error(error: BaseException, will_retry: bool = False) -> tuple[str, bool]:
    """
    Mensagem em português para uma falha de busca de endereço

    Args:
        error: exceção da busca
        will_retry: uma nova tentativa via proxy será feita

    Returns:
        (mensagem, relevante para o usuário)
    """
    status_code = getattr(error, "status_code", None)
    text = str(error)

    if is_network_error(error):
        suffix = " Tentando via proxy..." if will_retry else " Verifique sua conexão."
        return NETWORK_ERROR_MESSAGE + suffix, True
    if status_code == 429 or "429" in text:
        return RATE_LIMIT_MESSAGE, True
    if status_code == 425 or "425" in text:
        return TOO_EARLY_MESSAGE, True
    return DEFAULT_FETCH_ERROR_MESSAGE, False


class ReverseGeocoder:
    """
    Converte posições em endereços e publica o resultado

    Observa o PositionManager: a cada posição aceita busca o endereço no
    serviço de geocodificação, padroniza a resposta e notifica seus
    observadores com ``(raw, standardized, event, loading, error)``.

    Várias buscas podem estar em andamento ao mesmo tempo. Com
    ``discard_stale_responses`` apenas a resposta da posição mais recente
    é aplicada; sem ele vale a última resposta a chegar.
    """

    def __init__(
        self,
        fetch_manager: Any = None,
        *,
        address_data_extractor: Optional[AddressDataExtractor] = None,
        base_url: str = NOMINATIM_REVERSE_URL,
        cors_proxy: Optional[str] = None,
        enable_cors_fallback: bool = False,
        discard_stale_responses: bool = True,
        error_reporter: Optional[Callable[[str], Any]] = None,
        http_client: Optional[HTTPClient] = None,
    ) -> None:
        """
        Args:
            fetch_manager: objeto com fetch(url) síncrono ou assíncrono
                (None: requisição direta pelo http_client)
            address_data_extractor: padronização com cache e detecção de mudanças
            base_url: endpoint de geocodificação reversa
            cors_proxy: prefixo do proxy usado na nova tentativa
            enable_cors_fallback: tenta uma vez via proxy após falha de rede
            discard_stale_responses: descarta respostas de posições antigas
            error_reporter: recebe mensagens de erro para o usuário
            http_client: cliente HTTP da requisição direta
        """
        self.fetch_manager = fetch_manager
        self.address_data_extractor = address_data_extractor
        self.base_url = base_url
        self.cors_proxy = cors_proxy or DEFAULT_CORS_PROXY
        self.enable_cors_fallback = enable_cors_fallback
        self.discard_stale_responses = discard_stale_responses
        self.error_reporter = error_reporter
        self._http_client = http_client

        self.observer_subject = ObserverSubject()

        self.latitude: Optional[float] = None
        self.longitude: Optional[float] = None
        self.url: Optional[str] = None
        self.current_address: Optional[dict[str, Any]] = None
        self.standardized_address: Optional[BrazilianStandardAddress] = None
        self.error: Optional[BaseException] = None
        self.last_error_message: Optional[str] = None
        self.loading = False

        self._generation = 0
        self._tasks: set[asyncio.Task] = set()

    @property
    def http_client(self) -> HTTPClient:
        if self._http_client is None:
            self._http_client = HTTPClient()
        return self._http_client

    @property
    def generation(self) -> int:
        """Número da atualização de posição mais recente"""
        return self._generation

    def cache_key(self) -> str:
        return f"{self.latitude},{self.longitude}"

    def set_coordinates(self, latitude: Optional[float], longitude: Optional[float]) -> None:
        """
        Define as coordenadas da próxima busca

        Coordenadas None são ignoradas; zero é uma coordenada válida.
        """
        if latitude is None or longitude is None:
            return

        self.latitude = latitude
        self.longitude = longitude
        self.url = build_reverse_url(self.base_url, latitude, longitude)
        self.current_address = None
        self.error = None
        self.loading = False

    async def reverse_geocode(self, *, use_proxy: bool = False) -> dict[str, Any]:
        """
        Busca a resposta bruta para as coordenadas atuais

        Raises:
            InvalidCoordinatesError: coordenadas não definidas
            HTTPError: falha na requisição (propagada sem alteração)
        """
        if self.latitude is None or self.longitude is None:
            raise InvalidCoordinatesError()

        if self.url is None:
            self.url = build_reverse_url(self.base_url, self.latitude, self.longitude)

        return await self._fetch(self._proxied(self.url) if use_proxy else self.url)

    async def fetch_address(self, *, use_proxy: bool = False) -> dict[str, Any]:
        """
        Busca, padroniza e publica o endereço das coordenadas atuais

        Após uma falha de rede, com ``enable_cors_fallback``, tenta uma
        única vez via proxy.

        Returns:
            resposta bruta do serviço

        Raises:
            InvalidCoordinatesError: coordenadas não definidas
            HTTPError: falha na busca (após notificar os observadores)
        """
        self.loading = True
        try:
            raw = await self.reverse_geocode(use_proxy=use_proxy)
        except Exception as err:
            can_retry = self.enable_cors_fallback and not use_proxy and is_network_error(err)
            self._report_error(err, will_retry=can_retry)
            if not can_retry:
                self._fail(err, ADDRESS_FETCH_FAILED_EVENT)
                raise

            logger.warning("Retrying with CORS proxy fallback")
            try:
                raw = await self.reverse_geocode(use_proxy=True)
            except Exception as retry_err:
                logger.warning(f"CORS proxy fallback also failed: {retry_err}")
                self._fail(err, ADDRESS_FETCH_FAILED_EVENT)
                raise err
            logger.info("CORS proxy fallback succeeded")

        return self._apply(raw, ADDRESS_FETCHED_EVENT)

    def update(
        self,
        position_manager: Any,
        pos_event: Any,
        data: Any = None,
        error: Any = None,
    ) -> Optional[asyncio.Task]:
        """
        Callback de observador do PositionManager

        Agenda a geocodificação da última posição no event loop em
        execução. Sem event loop a geocodificação roda até o fim com
        asyncio.run.

        Returns:
            task da geocodificação (re-levanta a falha após notificar),
            ou None quando não há o que geocodificar
        """
        if pos_event == PositionEvent.CURRENT_POSITION_NOT_UPDATE:
            # Posição rejeitada: mantém o endereço e a geração atuais
            return None

        last_position = getattr(position_manager, "last_position", None)
        if position_manager is None or last_position is None:
            logger.warning("Invalid PositionManager or no last position")
            return None

        latitude = getattr(last_position, "latitude", None)
        longitude = getattr(last_position, "longitude", None)
        if latitude is None or longitude is None:
            logger.warning("Position update received without valid coordinates")
            return None

        self.set_coordinates(latitude, longitude)
        self._generation += 1
        coroutine = self._geocode_for_update(self.url, pos_event, self._generation)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(coroutine)
            return None

        task = loop.create_task(coroutine)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    async def wait_pending(self) -> None:
        """Aguarda as geocodificações em andamento (falhas já foram notificadas)"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _geocode_for_update(self, url: str, pos_event: Any, generation: int) -> Any:
        self.loading = True
        try:
            raw = await self._fetch(url)
        except Exception as err:
            if self._is_stale(generation):
                logger.warning(f"Stale geocoding request failed: {err}")
                raise
            self._report_error(err, will_retry=False)
            self._fail(err, pos_event)
            raise

        if self._is_stale(generation):
            logger.info(
                f"Discarding stale geocoding response (generation {generation} < {self._generation})"
            )
            return None

        return self._apply(raw, pos_event)

    def _is_stale(self, generation: int) -> bool:
        return self.discard_stale_responses and generation < self._generation

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        # A falha já foi registrada e notificada; marca a exceção como recuperada
        if not task.cancelled():
            task.exception()

    async def _fetch(self, url: str) -> Any:
        if self.fetch_manager is None:
            return await asyncio.to_thread(self.http_client.get_json, url)

        fetch = self.fetch_manager.fetch
        if inspect.iscoroutinefunction(fetch):
            return await fetch(url)

        result = await asyncio.to_thread(fetch, url)
        if inspect.isawaitable(result):
            result = await result
        return result

    def _proxied(self, url: str) -> str:
        return f"{self.cors_proxy}{quote(url, safe='')}"

    def _apply(self, raw: dict[str, Any], event: Any) -> dict[str, Any]:
        self.current_address = raw
        self.standardized_address = self._standardize(raw)
        self.error = None
        self.loading = False
        self.notify_observers(raw, self.standardized_address, event, False, None)
        return raw

    def _standardize(self, raw: dict[str, Any]) -> BrazilianStandardAddress:
        if self.address_data_extractor is not None:
            return self.address_data_extractor.get_brazilian_standard_address(raw)
        return standardize_address(raw)

    def _fail(self, err: BaseException, event: Any) -> None:
        self.error = err
        self.loading = False
        self.notify_observers(None, None, event, False, err)

    def _report_error(self, err: BaseException, will_retry: bool) -> None:
        message, user_relevant = classify_fetch_error(err, will_retry=will_retry)
        self.last_error_message = message
        logger.error(f"Address fetch failed: {err}")
        if user_relevant and self.error_reporter is not None:
            try:
                self.error_reporter(message)
            except Exception as e:
                logger.error(f"Error reporter failed: {e}", exc_info=True)

    # Observadores

    def subscribe(self, observer: Observer) -> None:
        self.observer_subject.subscribe(observer)

    def unsubscribe(self, observer: Observer) -> None:
        self.observer_subject.unsubscribe(observer)

    def subscribe_function(self, fn: Callable[..., Any]) -> None:
        self.observer_subject.subscribe_function(fn)

    def unsubscribe_function(self, fn: Callable[..., Any]) -> None:
        self.observer_subject.unsubscribe_function(fn)

    def notify_observers(self, *args: Any) -> None:
        self.observer_subject.notify_observers(*args)

    def __str__(self) -> str:
        if self.latitude is None or self.longitude is None:
            return f"{self.__class__.__name__}: No coordinates set"
        return f"{self.__class__.__name__}: {self.latitude}, {self.longitude}"
