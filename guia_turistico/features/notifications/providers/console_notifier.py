"""Notificador de console"""
import sys
from typing import Optional, TextIO

from ....shared.logging.config import get_logger
from ..domain.models import Announcement

logger = get_logger(__name__)


class ConsoleNotifier:
    """Escreve os anúncios em um stream de texto (padrão: stdout)"""

    def __init__(self, stream: Optional[TextIO] = None, show_timestamp: bool = True) -> None:
        """
        Args:
            stream: destino dos anúncios
            show_timestamp: prefixa cada anúncio com o horário
        """
        self.stream = stream or sys.stdout
        self.show_timestamp = show_timestamp
        self.sent: list[Announcement] = []

        logger.info("ConsoleNotifier initialized")

    def send(self, announcement: Announcement) -> None:
        """Escreve o anúncio no stream"""
        line = str(announcement)
        if self.show_timestamp:
            line = f"[{announcement.timestamp.strftime('%H:%M:%S')}] {line}"

        print(line, file=self.stream, flush=True)
        self.sent.append(announcement)

        logger.debug(
            f"Announcement sent: priority={announcement.priority.name} "
            f"type={announcement.change_type or 'full_address'}"
        )
