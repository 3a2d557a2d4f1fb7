"""Cache LRU em memória com expiração por tempo"""
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Hashable, Optional


class LRUCache:
    """
    Cache LRU com expiração

    Entradas expiram ``expiration_seconds`` após serem gravadas; ao atingir
    ``max_size`` a entrada menos usada recentemente é descartada. As
    operações são protegidas por lock (buscas rodam em threads de
    ``asyncio.to_thread``).
    """

    def __init__(
        self,
        max_size: int = 50,
        expiration_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Args:
            max_size: número máximo de entradas
            expiration_seconds: tempo de vida de cada entrada
            clock: relógio em segundos (substituível em testes)
        """
        self.max_size = max_size
        self.expiration_seconds = expiration_seconds
        self._clock = clock
        self._entries: OrderedDict[Hashable, tuple[Any, float]] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            value, stored_at = entry
            if self._clock() - stored_at > self.expiration_seconds:
                del self._entries[key]
                return None

            self._entries.move_to_end(key)
            return value

    def set(self, key: Hashable, value: Any) -> None:
        with self._lock:
            if key in self._entries:
                del self._entries[key]
            elif len(self._entries) >= self.max_size:
                self._entries.popitem(last=False)
            self._entries[key] = (value, self._clock())

    def clean_expired(self) -> int:
        """
        Remove as entradas expiradas

        Returns:
            número de entradas removidas
        """
        with self._lock:
            now = self._clock()
            expired = [
                key
                for key, (_, stored_at) in self._entries.items()
                if now - stored_at > self.expiration_seconds
            ]
            for key in expired:
                del self._entries[key]
            return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __repr__(self) -> str:
        return (
            f"LRUCache(size={len(self)}/{self.max_size}, "
            f"expiration={self.expiration_seconds}s)"
        )
