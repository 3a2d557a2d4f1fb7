"""Estado atual de posição do usuário"""
from typing import Any, Callable, Optional

from ....shared.logging.config import get_logger
from ..domain.models import Position

logger = get_logger(__name__)

StateCallback = Callable[[dict[str, Any]], Any]


class GeocodingState:
    """
    Fonte única de "onde o usuário está agora"

    Guarda a posição atual e a anterior, com as coordenadas da atual.
    Callbacks inscritos recebem ``{"position": ..., "coordinates": ...}``
    a cada nova posição.
    """

    def __init__(self) -> None:
        self._current_position: Optional[Position] = None
        self._previous_position: Optional[Position] = None
        self._current_coordinates: Optional[dict[str, float]] = None
        self._callbacks: list[StateCallback] = []

    def set_position(self, position: Optional[Position]) -> "GeocodingState":
        """
        Define a posição atual

        None limpa a posição atual sem notificar.

        Raises:
            TypeError: o valor não é uma Position
        """
        if position is None:
            self._current_position = None
            self._current_coordinates = None
            return self

        if not isinstance(position, Position):
            raise TypeError(f"Expected Position or None, got {type(position).__name__}")

        self._previous_position = self._current_position
        self._current_position = position
        self._current_coordinates = position.coordinates()

        self._notify({"position": position, "coordinates": position.coordinates()})
        return self

    def get_current_position(self) -> Optional[Position]:
        return self._current_position

    def get_previous_position(self) -> Optional[Position]:
        return self._previous_position

    def get_current_coordinates(self) -> Optional[dict[str, float]]:
        """Cópia das coordenadas atuais (alterá-la não afeta o estado)"""
        if self._current_coordinates is None:
            return None
        return dict(self._current_coordinates)

    def has_position(self) -> bool:
        return self._current_position is not None

    def subscribe(self, callback: StateCallback) -> Callable[[], None]:
        """
        Inscreve um callback

        Returns:
            função que cancela a inscrição

        Raises:
            TypeError: callback não é chamável
        """
        if not callable(callback):
            raise TypeError(f"Callback must be callable: {callback!r}")
        self._callbacks.append(callback)
        return lambda: self.unsubscribe(callback)

    def unsubscribe(self, callback: StateCallback) -> None:
        self._callbacks = [c for c in self._callbacks if c is not callback]

    @property
    def observer_count(self) -> int:
        return len(self._callbacks)

    def clear(self) -> None:
        """Limpa posições e callbacks"""
        self._current_position = None
        self._previous_position = None
        self._current_coordinates = None
        self._callbacks = []

    def _notify(self, state: dict[str, Any]) -> None:
        for callback in list(self._callbacks):
            try:
                callback(state)
            except Exception as e:
                logger.error(f"GeocodingState callback failed: {e}", exc_info=True)
