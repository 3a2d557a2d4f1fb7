"""Padronização de endereços com cache e detecção de mudanças"""
import asyncio
from typing import Any, Callable, Mapping, Optional

from ....shared.cache.lru_cache import LRUCache
from ....shared.logging.config import get_logger
from ....shared.observer.subject import Observer, ObserverSubject
from ..domain.models import BrazilianStandardAddress, ChangeDetails
from .address_extractor import compute_bairro_completo, generate_cache_key, standardize_address
from .change_detector import AddressChangeDetector, AddressDataStore

logger = get_logger(__name__)

ChangeCallback = Callable[[ChangeDetails], Any]

DEFAULT_CACHE_SIZE = 50
DEFAULT_CACHE_EXPIRATION_SECONDS = 300.0
DEFAULT_CLEANUP_INTERVAL_SECONDS = 60.0

TRACKED_FIELDS = ("logradouro", "bairro", "municipio")


class AddressDataExtractor:
    """
    Converte respostas do Nominatim em endereços padronizados

    Respostas novas (cache miss) passam pela detecção de mudanças de
    logradouro, bairro e município em relação ao endereço anterior; o
    callback registrado para o componente alterado é chamado com um
    ChangeDetails. Respostas vindas do cache não disparam detecção. As
    assinaturas de mudança são zeradas a cada cache miss, de modo que
    apenas uma nova padronização volta a informar uma transição.

    A limpeza periódica do cache é uma task asyncio iniciada com
    ``start_cleanup_task`` e encerrada com ``close``.
    """

    def __init__(
        self,
        cache: Optional[LRUCache] = None,
        cleanup_interval: float = DEFAULT_CLEANUP_INTERVAL_SECONDS,
    ) -> None:
        """
        Args:
            cache: cache de endereços (padrão: 50 entradas, 300 s)
            cleanup_interval: intervalo da limpeza periódica (segundos)
        """
        self.cache = cache if cache is not None else LRUCache(DEFAULT_CACHE_SIZE, DEFAULT_CACHE_EXPIRATION_SECONDS)
        self.cleanup_interval = cleanup_interval

        self.observer_subject = ObserverSubject()
        self.data_store = AddressDataStore()
        self.change_detector = AddressChangeDetector()
        self._callbacks: dict[str, Optional[ChangeCallback]] = {}
        self._cleanup_task: Optional[asyncio.Task] = None

        logger.info(
            f"AddressDataExtractor initialized: cache_size={self.cache.max_size}, "
            f"expiration={self.cache.expiration_seconds}s"
        )

    @property
    def current_address(self) -> Optional[BrazilianStandardAddress]:
        return self.data_store.current_address

    @property
    def previous_address(self) -> Optional[BrazilianStandardAddress]:
        return self.data_store.previous_address

    @property
    def cache_size(self) -> int:
        return len(self.cache)

    # Callbacks de mudança

    def set_logradouro_change_callback(self, callback: Optional[ChangeCallback]) -> None:
        self._register_callback("logradouro", callback)

    def set_bairro_change_callback(self, callback: Optional[ChangeCallback]) -> None:
        self._register_callback("bairro", callback)

    def set_municipio_change_callback(self, callback: Optional[ChangeCallback]) -> None:
        self._register_callback("municipio", callback)

    def get_logradouro_change_callback(self) -> Optional[ChangeCallback]:
        return self._callbacks.get("logradouro")

    def get_bairro_change_callback(self) -> Optional[ChangeCallback]:
        return self._callbacks.get("bairro")

    def get_municipio_change_callback(self) -> Optional[ChangeCallback]:
        return self._callbacks.get("municipio")

    def _register_callback(self, field: str, callback: Optional[ChangeCallback]) -> None:
        if callback is not None and not callable(callback):
            raise TypeError(
                f"Callback for {field} must be callable or None, got {type(callback).__name__}"
            )
        self._callbacks[field] = callback

    # Padronização

    def get_brazilian_standard_address(
        self, data: Optional[Mapping[str, Any]]
    ) -> BrazilianStandardAddress:
        """
        Endereço padronizado de uma resposta bruta

        Args:
            data: resposta JSON do Nominatim

        Returns:
            BrazilianStandardAddress: endereço em cache ou recém padronizado
        """
        cache_key = generate_cache_key(data)
        if cache_key:
            self.clean_expired_entries()
            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.debug(f"Address cache hit: {cache_key}")
                return cached

        address = standardize_address(data)

        if cache_key:
            self.cache.set(cache_key, address)
            # Nova resposta: transições anteriores deixam de valer
            self.change_detector.clear_all_signatures()
            self.data_store.update(address, dict(data) if data else None)
            self._detect_changes()

        self.observer_subject.notify_observers(
            {"type": "addressUpdated", "address": address, "cache_size": self.cache_size}
        )
        return address

    # Detecção de mudanças

    def has_logradouro_changed(self) -> bool:
        return self._has_changed("logradouro")

    def has_bairro_changed(self) -> bool:
        return self._has_changed("bairro")

    def has_municipio_changed(self) -> bool:
        return self._has_changed("municipio")

    def _has_changed(self, field: str) -> bool:
        return self.change_detector.has_field_changed(
            field, self.data_store.current_address, self.data_store.previous_address
        )

    def get_logradouro_change_details(self) -> ChangeDetails:
        current = self.data_store.current_address
        previous = self.data_store.previous_address
        current_value = current.logradouro if current else None
        previous_value = previous.logradouro if previous else None
        return ChangeDetails(
            field="logradouro",
            previous={"logradouro": previous_value},
            current={"logradouro": current_value},
            has_changed=current_value != previous_value,
            previous_address=previous,
            current_address=current,
        )

    def get_bairro_change_details(self) -> ChangeDetails:
        current = self.data_store.current_address
        previous = self.data_store.previous_address
        current_value = current.bairro if current else None
        previous_value = previous.bairro if previous else None
        return ChangeDetails(
            field="bairro",
            previous={
                "bairro": previous_value,
                "bairro_completo": compute_bairro_completo(self.data_store.previous_raw),
            },
            current={
                "bairro": current_value,
                "bairro_completo": compute_bairro_completo(self.data_store.current_raw),
            },
            has_changed=current_value != previous_value,
            previous_address=previous,
            current_address=current,
        )

    def get_municipio_change_details(self) -> ChangeDetails:
        current = self.data_store.current_address
        previous = self.data_store.previous_address
        current_value = current.municipio if current else None
        previous_value = previous.municipio if previous else None
        return ChangeDetails(
            field="municipio",
            previous={"municipio": previous_value, "uf": previous.uf if previous else None},
            current={"municipio": current_value, "uf": current.uf if current else None},
            has_changed=current_value != previous_value,
            previous_address=previous,
            current_address=current,
        )

    def _detect_changes(self) -> None:
        detail_builders = {
            "logradouro": self.get_logradouro_change_details,
            "bairro": self.get_bairro_change_details,
            "municipio": self.get_municipio_change_details,
        }
        for field in TRACKED_FIELDS:
            callback = self._callbacks.get(field)
            # Sem callback a assinatura não é registrada
            if callback is None or not self._has_changed(field):
                continue

            logger.info(f"Detected {field} change")
            try:
                callback(detail_builders[field]())
            except Exception as e:
                logger.error(f"Error calling {field} change callback: {e}", exc_info=True)

    # Cache

    def clean_expired_entries(self) -> int:
        removed = self.cache.clean_expired()
        if removed > 0:
            logger.debug(f"Cleaned {removed} expired cache entries")
        return removed

    def clear_cache(self) -> None:
        """Limpa cache, histórico e assinaturas de mudança"""
        self.cache.clear()
        self.data_store.clear()
        self.change_detector.clear_all_signatures()

    def start_cleanup_task(self, interval: Optional[float] = None) -> asyncio.Task:
        """
        Inicia a limpeza periódica do cache no event loop em execução

        Returns:
            task da limpeza (a mesma se já iniciada)
        """
        if self._cleanup_task is not None and not self._cleanup_task.done():
            return self._cleanup_task

        interval = interval if interval is not None else self.cleanup_interval
        self._cleanup_task = asyncio.get_running_loop().create_task(self._cleanup_loop(interval))
        logger.debug(f"Cache cleanup task started: every {interval}s")
        return self._cleanup_task

    async def _cleanup_loop(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            self.clean_expired_entries()

    def close(self) -> None:
        """Cancela a limpeza periódica"""
        if self._cleanup_task is not None:
            self._cleanup_task.cancel()
            self._cleanup_task = None
            logger.debug("Cache cleanup task cancelled")

    # Observadores

    def subscribe(self, observer: Observer) -> None:
        self.observer_subject.subscribe(observer)

    def unsubscribe(self, observer: Observer) -> None:
        self.observer_subject.unsubscribe(observer)

    def subscribe_function(self, fn: Callable[..., Any]) -> None:
        self.observer_subject.subscribe_function(fn)

    def unsubscribe_function(self, fn: Callable[..., Any]) -> None:
        self.observer_subject.unsubscribe_function(fn)

    def __repr__(self) -> str:
        return (
            f"AddressDataExtractor(cache={len(self.cache)}, "
            f"current={self.current_address}, previous={self.previous_address})"
        )
