"""Fetch manager com cache de respostas"""
import inspect
import threading
from typing import Any, Optional

from ....shared.cache.lru_cache import LRUCache
from ....shared.logging.config import get_logger

logger = get_logger(__name__)


class CacheFetchManager:
    """
    Fetch manager com cache em memória

    Reduz chamadas repetidas à API para a mesma URL (mesmas coordenadas).
    Apenas respostas bem-sucedidas são guardadas.
    """

    def __init__(
        self,
        fetch_manager: Any,
        cache: Optional[LRUCache] = None,
    ) -> None:
        """
        Args:
            fetch_manager: fetch manager base (fetch síncrono)
            cache: cache das respostas (padrão: 100 entradas, 300 s)
        """
        if inspect.iscoroutinefunction(getattr(fetch_manager, "fetch", None)):
            raise TypeError("CacheFetchManager wraps synchronous fetch managers only")

        self.fetch_manager = fetch_manager
        self.cache = cache if cache is not None else LRUCache(max_size=100, expiration_seconds=300.0)
        self.hit_count = 0
        self.miss_count = 0
        self._stats_lock = threading.Lock()

        logger.info("CacheFetchManager initialized")

    def fetch(self, url: str) -> dict[str, Any]:
        """
        Busca a URL (com cache)

        Args:
            url: URL completa da consulta

        Returns:
            resposta JSON
        """
        cached = self.cache.get(url)
        if cached is not None:
            with self._stats_lock:
                self.hit_count += 1
            logger.debug("Response cache hit")
            return cached

        with self._stats_lock:
            self.miss_count += 1
        logger.debug("Response cache miss")

        data = self.fetch_manager.fetch(url)
        self.cache.set(url, data)
        return data

    def clear_cache(self) -> None:
        """Limpa o cache e as estatísticas"""
        cache_size = len(self.cache)
        self.cache.clear()
        with self._stats_lock:
            self.hit_count = 0
            self.miss_count = 0
        logger.info(f"Cache cleared: {cache_size} entries removed")

    def get_cache_stats(self) -> dict[str, float]:
        """
        Estatísticas do cache

        Returns:
            dict: tamanho, acertos, falhas, total e taxa de acerto (%)
        """
        total_requests = self.hit_count + self.miss_count
        hit_rate = (self.hit_count / total_requests * 100) if total_requests > 0 else 0.0

        stats = {
            "cache_size": len(self.cache),
            "hit_count": self.hit_count,
            "miss_count": self.miss_count,
            "total_requests": total_requests,
            "hit_rate_percent": round(hit_rate, 2),
        }

        logger.info(f"Cache stats: {stats}")

        return stats

    def close(self) -> None:
        close = getattr(self.fetch_manager, "close", None)
        if callable(close):
            close()
