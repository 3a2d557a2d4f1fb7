"""Limitação de taxa de requisições"""

import threading
import time
from typing import Callable, Optional

from ..logging.config import get_logger

logger = get_logger(__name__)


class RateLimiter:
    """
    Garante um intervalo mínimo entre requisições

    A política de uso do Nominatim público limita clientes a
    1 requisição por segundo. Seguro para uso a partir de várias threads.
    """

    def __init__(
        self,
        min_interval: float = 1.0,
        requests_per_second: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            min_interval: intervalo mínimo entre requisições (segundos)
            requests_per_second: máximo de requisições por segundo (sobrepõe min_interval)
            clock: relógio monotônico (injetável para testes)
            sleep: função de espera (injetável para testes)
        """
        if requests_per_second:
            self.min_interval = 1.0 / requests_per_second
        else:
            self.min_interval = min_interval

        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self.last_request_time: Optional[float] = None

        logger.debug(f"RateLimiter initialized: min_interval={self.min_interval:.2f}s")

    def wait(self) -> float:
        """
        Espera o necessário desde a última requisição

        Returns:
            tempo de espera efetivo (segundos)
        """
        with self._lock:
            current_time = self._clock()
            sleep_duration = 0.0

            if self.last_request_time is not None:
                elapsed = current_time - self.last_request_time
                if elapsed < self.min_interval:
                    sleep_duration = self.min_interval - elapsed
                    logger.debug(f"Rate limiting: sleeping for {sleep_duration:.2f}s")
                    self._sleep(sleep_duration)

            self.last_request_time = self._clock()
            return sleep_duration

    def reset(self) -> None:
        """Reinicia o limitador"""
        with self._lock:
            self.last_request_time = None
        logger.debug("RateLimiter reset")
