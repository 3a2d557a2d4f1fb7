"""Provedor de geolocalização simulado"""
import asyncio
from typing import Callable, Optional

from ....shared.logging.config import get_logger
from ..domain.models import GeolocationOptions, Position, PositionError
from .base import ErrorCallback, GeolocationProvider, SuccessCallback

logger = get_logger(__name__)


class MockGeolocationProvider(GeolocationProvider):
    """
    Provedor simulado para testes e demonstrações

    Entrega uma posição (ou erro) configurada no próximo ciclo do event
    loop, depois de ``delay`` segundos, imitando o comportamento
    assíncrono dos navegadores.
    """

    def __init__(
        self,
        default_position: Optional[Position] = None,
        default_error: Optional[PositionError] = None,
        supported: bool = True,
        delay: float = 0.0,
        permission_state: Optional[str] = None,
    ) -> None:
        """
        Args:
            default_position: posição entregue aos callbacks
            default_error: erro entregue no lugar da posição
            supported: se False o provedor se declara indisponível
            delay: atraso de entrega (segundos)
            permission_state: estado devolvido por query_permission (None: sem API)
        """
        self.default_position = default_position
        self.default_error = default_error
        self.supported = supported
        self.delay = delay
        self.permission_state = permission_state

        self.watch_id_counter = 0
        self.active_watches: dict[int, tuple[SuccessCallback, ErrorCallback]] = {}
        self.get_current_position_calls = 0
        self.watch_position_calls = 0

    def get_current_position(
        self,
        on_success: SuccessCallback,
        on_error: ErrorCallback,
        options: GeolocationOptions,
    ) -> None:
        self.get_current_position_calls += 1

        if not self.is_supported():
            self._call_with_delay(lambda: on_error(PositionError(0, "Geolocation is not supported")))
            return

        def deliver() -> None:
            if self.default_error is not None:
                on_error(self.default_error)
            elif self.default_position is not None:
                on_success(self.default_position)
            else:
                on_error(PositionError(2, "Position unavailable"))

        self._call_with_delay(deliver)

    def watch_position(
        self,
        on_success: SuccessCallback,
        on_error: ErrorCallback,
        options: GeolocationOptions,
    ) -> Optional[int]:
        self.watch_position_calls += 1

        if not self.is_supported():
            return None

        self.watch_id_counter += 1
        watch_id = self.watch_id_counter
        self.active_watches[watch_id] = (on_success, on_error)

        def deliver() -> None:
            # Watch cancelado antes da entrega
            if watch_id not in self.active_watches:
                return
            if self.default_error is not None:
                on_error(self.default_error)
            elif self.default_position is not None:
                on_success(self.default_position)

        self._call_with_delay(deliver)
        return watch_id

    def clear_watch(self, watch_id: int) -> None:
        self.active_watches.pop(watch_id, None)

    def is_supported(self) -> bool:
        return self.supported

    def is_permissions_api_supported(self) -> bool:
        return self.permission_state is not None

    async def query_permission(self) -> str:
        if self.permission_state is None:
            raise NotImplementedError("Permissions API not available")
        return self.permission_state

    def set_position(self, position: Position) -> None:
        self.default_position = position
        self.default_error = None

    def set_error(self, error: PositionError) -> None:
        self.default_error = error
        self.default_position = None

    def trigger_watch_update(self, position: Optional[Position] = None) -> None:
        """Entrega imediatamente uma posição a todos os watches ativos"""
        position_to_send = position or self.default_position
        if position_to_send is None:
            return
        for on_success, _ in list(self.active_watches.values()):
            on_success(position_to_send)

    def trigger_watch_error(self, error: Optional[PositionError] = None) -> None:
        """Entrega imediatamente um erro a todos os watches ativos"""
        error_to_send = error or self.default_error or PositionError(2, "Position unavailable")
        for _, on_error in list(self.active_watches.values()):
            on_error(error_to_send)

    def _call_with_delay(self, fn: Callable[[], None]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Fora de um event loop: entrega síncrona
            fn()
            return
        if self.delay > 0:
            loop.call_later(self.delay, fn)
        else:
            loop.call_soon(fn)
