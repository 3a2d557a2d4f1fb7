"""Serviço de acesso ao provedor de geolocalização"""
import asyncio
from typing import Callable, Optional

from ....shared.exceptions.errors import (
    GeolocationError,
    GeolocationTimeoutError,
    NotSupportedError,
    PermissionDeniedError,
    PositionUnavailableError,
    RequestPendingError,
    UnknownGeolocationError,
)
from ....shared.logging.config import get_logger
from ..domain.models import GeolocationOptions, Position, PositionError
from ..providers.base import GeolocationProvider
from .position_manager import PositionManager

logger = get_logger(__name__)

_ERROR_TYPES: dict[int, type[GeolocationError]] = {
    1: PermissionDeniedError,
    2: PositionUnavailableError,
    3: GeolocationTimeoutError,
}

_USER_MESSAGES = {
    1: "Permissão negada pelo usuário",
    2: "Posição indisponível",
    3: "Timeout na obtenção da posição",
}

PERMISSION_STATES = ("granted", "denied", "prompt")


def geolocation_error_message(code: Optional[int]) -> str:
    """Mensagem em português para exibição ao usuário"""
    return _USER_MESSAGES.get(code, "Erro desconhecido")


def format_geolocation_error(error: PositionError) -> GeolocationError:
    """Converte o erro bruto do provedor na exceção tipada correspondente"""
    error_type = _ERROR_TYPES.get(error.code, UnknownGeolocationError)
    return error_type(code=error.code, original_error=error)


class GeolocationService:
    """
    Acesso seguro e sem duplicação ao provedor de geolocalização

    A requisição avulsa (``get_single_location_update``) admite apenas uma
    chamada pendente por vez; o acompanhamento contínuo
    (``watch_current_location``) é um canal independente.
    Posições obtidas pelos dois caminhos seguem para o PositionManager.
    """

    def __init__(
        self,
        provider: GeolocationProvider,
        position_manager: PositionManager,
        options: Optional[GeolocationOptions] = None,
        on_position: Optional[Callable[[Position], None]] = None,
    ) -> None:
        """
        Args:
            provider: provedor de geolocalização
            position_manager: destino das posições obtidas
            options: opções repassadas ao provedor
            on_position: callback extra chamado a cada posição recebida
        """
        self.provider = provider
        self.position_manager = position_manager
        self.options = options or GeolocationOptions()
        self.on_position = on_position

        self.watch_id: Optional[int] = None
        self.is_watching = False
        self.last_known_position: Optional[Position] = None
        self.permission_status: Optional[str] = None
        self._pending_request = False

    def has_pending_request(self) -> bool:
        return self._pending_request

    def get_last_known_position(self) -> Optional[Position]:
        return self.last_known_position

    async def check_permissions(self) -> str:
        """
        Consulta o estado da permissão de localização

        Returns:
            "granted", "denied" ou "prompt" ("prompt" quando a consulta
            não é possível ou falha)
        """
        if not self.provider.is_permissions_api_supported():
            return "prompt"
        try:
            state = await self.provider.query_permission()
        except Exception as e:
            logger.error(f"Error checking permissions: {e}")
            return "prompt"

        if state not in PERMISSION_STATES:
            logger.warning(f"Unexpected permission state: {state}")
            return "prompt"
        self.permission_status = state
        return state

    async def get_single_location_update(self) -> Position:
        """
        Obtém uma única posição

        Returns:
            posição entregue pelo provedor

        Raises:
            RequestPendingError: já existe uma requisição em andamento
            NotSupportedError: provedor indisponível
            GeolocationError: erro do provedor (subclasse conforme o código)
        """
        if self._pending_request:
            raise RequestPendingError()
        if not self.provider.is_supported():
            raise NotSupportedError()

        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()

        def on_success(position: Position) -> None:
            loop.call_soon_threadsafe(_resolve, future, position)

        def on_error(error: PositionError) -> None:
            loop.call_soon_threadsafe(_reject, future, error)

        self._pending_request = True
        try:
            self.provider.get_current_position(on_success, on_error, self.options)
            outcome = await future
        finally:
            self._pending_request = False

        if isinstance(outcome, PositionError):
            logger.error(f"Single location update failed: {outcome.message or outcome.code}")
            raise format_geolocation_error(outcome)

        self._accept(outcome)
        return outcome

    def watch_current_location(self) -> Optional[int]:
        """
        Inicia o acompanhamento contínuo (idempotente)

        Returns:
            identificador do watch, ou None quando não suportado
        """
        if not self.provider.is_supported():
            logger.error("Geolocation is not supported by this provider")
            return None

        if self.is_watching:
            return self.watch_id

        loop = _running_loop()

        def on_success(position: Position) -> None:
            if loop is not None:
                loop.call_soon_threadsafe(self._accept, position)
            else:
                self._accept(position)

        def on_error(error: PositionError) -> None:
            logger.error(f"Position watch error: {error.message or error.code}")

        self.watch_id = self.provider.watch_position(on_success, on_error, self.options)
        self.is_watching = True
        logger.info(f"Position watch started (id={self.watch_id})")
        return self.watch_id

    def stop_watching(self) -> None:
        """Encerra o acompanhamento contínuo"""
        if self.watch_id is None or not self.is_watching:
            logger.info("No active position watch to stop")
            return

        self.provider.clear_watch(self.watch_id)
        logger.info(f"Position watch stopped (id={self.watch_id})")
        self.watch_id = None
        self.is_watching = False

    def _accept(self, position: Position) -> None:
        self.last_known_position = position
        self.position_manager.update(position)
        if self.on_position is not None:
            self.on_position(position)


def _resolve(future: asyncio.Future, position: Position) -> None:
    if not future.done():
        future.set_result(position)


def _reject(future: asyncio.Future, error: PositionError) -> None:
    if not future.done():
        future.set_result(error)


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None
