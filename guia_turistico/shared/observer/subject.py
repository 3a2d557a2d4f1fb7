"""Implementação do padrão Observer compartilhada pelos serviços"""

from typing import Any, Callable, Optional, Protocol, runtime_checkable

from ..logging.config import get_logger

logger = get_logger(__name__)


@runtime_checkable
class Observer(Protocol):
    """Qualquer objeto com um método update(...)"""

    def update(self, *args: Any) -> Any:
        ...


class FunctionObserver:
    """Adapta uma função simples à interface Observer"""

    def __init__(self, fn: Callable[..., Any]) -> None:
        self.fn = fn

    def update(self, *args: Any) -> Any:
        return self.fn(*args)

    def __repr__(self) -> str:
        return f"FunctionObserver({getattr(self.fn, '__name__', self.fn)!r})"


class ObserverSubject:
    """
    Registro de observadores com notificação síncrona

    Mantém duas listas ordenadas: observadores-objeto (com update) e
    observadores-função. A notificação percorre primeiro os objetos e
    depois as funções, na ordem de inscrição. A falha de um observador é
    registrada em log e não impede a notificação dos demais.

    Inscrições repetidas não são deduplicadas: o mesmo observador
    inscrito duas vezes é notificado duas vezes.
    """

    def __init__(self) -> None:
        self._observers: list[Observer] = []
        self._function_observers: list[FunctionObserver] = []

    @property
    def observers(self) -> tuple[Observer, ...]:
        return tuple(self._observers)

    @property
    def function_observers(self) -> tuple[Callable[..., Any], ...]:
        return tuple(adapter.fn for adapter in self._function_observers)

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    @property
    def function_observer_count(self) -> int:
        return len(self._function_observers)

    def subscribe(self, observer: Optional[Observer]) -> None:
        """
        Inscreve um observador-objeto

        Raises:
            TypeError: o objeto não possui um método update
        """
        if observer is None:
            return
        if not callable(getattr(observer, "update", None)):
            raise TypeError(f"Observer must have an update() method: {observer!r}")
        # Nova lista a cada alteração: uma notificação em curso não é afetada
        self._observers = [*self._observers, observer]

    def unsubscribe(self, observer: Observer) -> None:
        """Remove todas as inscrições do observador (ausente: nada acontece)"""
        self._observers = [o for o in self._observers if o is not observer]

    def subscribe_function(self, fn: Optional[Callable[..., Any]]) -> None:
        """
        Inscreve uma função

        Raises:
            TypeError: o argumento não é chamável
        """
        if fn is None:
            return
        if not callable(fn):
            raise TypeError(f"Function observer must be callable: {fn!r}")
        self._function_observers = [*self._function_observers, FunctionObserver(fn)]

    def unsubscribe_function(self, fn: Callable[..., Any]) -> None:
        """Remove todas as inscrições da função (ausente: nada acontece)"""
        self._function_observers = [a for a in self._function_observers if a.fn is not fn]

    def notify_observers(self, *args: Any) -> None:
        """Notifica observadores-objeto e depois observadores-função"""
        self._notify_each(self._observers, args)
        self._notify_each(self._function_observers, args)

    def notify_object_observers(self, *args: Any) -> None:
        """Notifica apenas os observadores-objeto"""
        self._notify_each(self._observers, args)

    def notify_function_observers(self, *args: Any) -> None:
        """Notifica apenas os observadores-função"""
        self._notify_each(self._function_observers, args)

    def clear(self) -> None:
        """Remove todos os observadores"""
        self._observers = []
        self._function_observers = []

    @staticmethod
    def _notify_each(observers: list, args: tuple) -> None:
        for observer in observers:
            try:
                observer.update(*args)
            except Exception as e:
                logger.error(f"Observer {observer!r} failed: {e}", exc_info=True)
