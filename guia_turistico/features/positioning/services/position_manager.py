"""Gerenciador da última posição aceita"""
from typing import Any, Callable, Optional

from ....shared.logging.config import get_logger
from ....shared.observer.subject import Observer, ObserverSubject
from ..domain.models import Position, PositionEvent, PositionUpdateIssue

logger = get_logger(__name__)

DEFAULT_TRACKING_INTERVAL_MS = 50000
DEFAULT_MINIMUM_DISTANCE_CHANGE = 20.0
DEFAULT_NOT_ACCEPTED_ACCURACY = ("medium", "bad", "very bad")


class PositionManager:
    """
    Mantém a última posição aceita e publica as atualizações

    Cada nova posição passa por três filtros:

    1. Precisão: qualidade em ``not_accepted_accuracy`` é rejeitada
    2. Distância: deslocamento menor que ``minimum_distance_change`` é rejeitado
    3. Tempo: posição aceita antes de ``tracking_interval_ms`` gera
       ``IMMEDIATE_ADDRESS_UPDATE`` em vez de ``CURRENT_POSITION_UPDATE``

    Observadores recebem ``update(position_manager, event, data, issue)``.
    """

    def __init__(
        self,
        tracking_interval_ms: int = DEFAULT_TRACKING_INTERVAL_MS,
        minimum_distance_change: float = DEFAULT_MINIMUM_DISTANCE_CHANGE,
        not_accepted_accuracy: tuple[str, ...] = DEFAULT_NOT_ACCEPTED_ACCURACY,
    ) -> None:
        self.tracking_interval_ms = tracking_interval_ms
        self.minimum_distance_change = minimum_distance_change
        self.not_accepted_accuracy = tuple(not_accepted_accuracy)

        self.observer_subject = ObserverSubject()
        self.last_position: Optional[Position] = None
        self.last_modified: Optional[int] = None

    @property
    def observers(self) -> tuple[Observer, ...]:
        return self.observer_subject.observers

    def subscribe(self, observer: Observer) -> None:
        self.observer_subject.subscribe(observer)

    def unsubscribe(self, observer: Observer) -> None:
        self.observer_subject.unsubscribe(observer)

    def subscribe_function(self, fn: Callable[..., Any]) -> None:
        self.observer_subject.subscribe_function(fn)

    def unsubscribe_function(self, fn: Callable[..., Any]) -> None:
        self.observer_subject.unsubscribe_function(fn)

    @property
    def latitude(self) -> Optional[float]:
        return self.last_position.latitude if self.last_position else None

    @property
    def longitude(self) -> Optional[float]:
        return self.last_position.longitude if self.last_position else None

    @property
    def accuracy(self) -> Optional[float]:
        return self.last_position.accuracy if self.last_position else None

    @property
    def accuracy_quality(self) -> Optional[str]:
        return self.last_position.accuracy_quality if self.last_position else None

    @property
    def altitude(self) -> Optional[float]:
        return self.last_position.altitude if self.last_position else None

    @property
    def heading(self) -> Optional[float]:
        return self.last_position.heading if self.last_position else None

    @property
    def speed(self) -> Optional[float]:
        return self.last_position.speed if self.last_position else None

    @property
    def timestamp(self) -> Optional[int]:
        return self.last_position.timestamp if self.last_position else None

    def notify_observers(
        self,
        event: PositionEvent,
        data: Any = None,
        issue: Optional[PositionUpdateIssue] = None,
    ) -> None:
        self.observer_subject.notify_observers(self, event, data, issue)

    def update(self, position: Optional[Position]) -> None:
        """
        Submete uma nova posição aos filtros

        Args:
            position: leitura do provedor (None ou sem timestamp é ignorada)
        """
        if position is None or not getattr(position, "timestamp", None):
            logger.warning("Invalid position data ignored")
            return

        issue = self._check_rejection(position)
        if issue is not None:
            self.notify_observers(PositionEvent.CURRENT_POSITION_NOT_UPDATE, None, issue)
            return

        elapsed_ms = position.timestamp - (self.last_modified or 0)
        if self.last_modified is not None and elapsed_ms < self.tracking_interval_ms:
            message = (
                f"Less than {self.tracking_interval_ms / 1000} seconds since last update: "
                f"{elapsed_ms / 1000} seconds"
            )
            logger.debug(message)
            issue = PositionUpdateIssue("ElapseTimeError", message)
            event = PositionEvent.IMMEDIATE_ADDRESS_UPDATE
        else:
            event = PositionEvent.CURRENT_POSITION_UPDATE

        self.last_position = position
        self.last_modified = position.timestamp
        self.notify_observers(event, None, issue)

    def _check_rejection(self, position: Position) -> Optional[PositionUpdateIssue]:
        quality = position.accuracy_quality
        if quality in self.not_accepted_accuracy:
            logger.warning(f"Accuracy not good enough: {position.accuracy} m ({quality})")
            return PositionUpdateIssue("AccuracyError", "Accuracy is not good enough")

        if self.last_position is not None:
            distance = self.last_position.distance_to(position)
            if distance < self.minimum_distance_change:
                logger.debug(f"Movement not significant enough: {distance:.1f} m")
                return PositionUpdateIssue("DistanceError", "Movement is not significant enough")

        return None

    def __str__(self) -> str:
        if self.last_position is None:
            return f"{self.__class__.__name__}: No position data"
        return f"{self.__class__.__name__}: {self.last_position}"
