"""Interface dos provedores de geolocalização"""
from abc import ABC, abstractmethod
from typing import Callable, Optional

from ..domain.models import GeolocationOptions, Position, PositionError

SuccessCallback = Callable[[Position], None]
ErrorCallback = Callable[[PositionError], None]


class GeolocationProvider(ABC):
    """
    Provedor de geolocalização baseado em callbacks

    Espelha a Geolocation API dos navegadores: os callbacks podem ser
    chamados a partir de qualquer thread, cabe a quem chama levá-los ao
    event loop.
    """

    @abstractmethod
    def get_current_position(
        self,
        on_success: SuccessCallback,
        on_error: ErrorCallback,
        options: GeolocationOptions,
    ) -> None:
        raise NotImplementedError

    @abstractmethod
    def watch_position(
        self,
        on_success: SuccessCallback,
        on_error: ErrorCallback,
        options: GeolocationOptions,
    ) -> Optional[int]:
        raise NotImplementedError

    @abstractmethod
    def clear_watch(self, watch_id: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def is_supported(self) -> bool:
        raise NotImplementedError

    def is_permissions_api_supported(self) -> bool:
        return False

    async def query_permission(self) -> str:
        """Estado da permissão: granted, denied ou prompt"""
        raise NotImplementedError
