"""Anúncios de endereço e de mudanças de logradouro, bairro e município"""
import asyncio
import heapq
import itertools
from typing import Any, Optional, Protocol

from ....shared.logging.config import get_logger
from ...geocoding.domain.enums import ChangeType
from ...geocoding.domain.models import BrazilianStandardAddress, ChangeDetails
from ...positioning.domain.models import PositionEvent
from ..domain.models import Announcement, AnnouncementPriority

logger = get_logger(__name__)

_CHANGE_PRIORITIES = {
    ChangeType.MUNICIPIO: AnnouncementPriority.MUNICIPIO,
    ChangeType.BAIRRO: AnnouncementPriority.BAIRRO,
    ChangeType.LOGRADOURO: AnnouncementPriority.LOGRADOURO,
}


class Notifier(Protocol):
    def send(self, announcement: Announcement) -> None:
        ...


def build_logradouro_text(address: Optional[BrazilianStandardAddress]) -> str:
    if address is None or not address.logradouro:
        return "Nova localização detectada"
    return f"Você está agora em {address.logradouro_completo()}"


def build_bairro_text(address: Optional[BrazilianStandardAddress]) -> str:
    if address is None or not address.bairro:
        return "Novo bairro detectado"
    return f"Você entrou no bairro {address.bairro_completo()}"


def build_municipio_text(
    address: Optional[BrazilianStandardAddress], details: Optional[ChangeDetails] = None
) -> str:
    if address is None or not address.municipio:
        return "Novo município detectado"
    previous = details.previous.get("municipio") if details is not None else None
    if previous:
        return f"Você saiu de {previous} e entrou em {address.municipio}"
    return f"Você entrou no município de {address.municipio}"


def build_full_address_text(address: Optional[BrazilianStandardAddress]) -> str:
    """
    Texto do endereço completo, do nível mais detalhado disponível

    1. "Você está em {logradouro}, {bairro}, {municipio}"
    2. "Você está em bairro {bairro}, {municipio}"
    3. "Você está em {municipio}"
    """
    if address is None:
        return "Localização não disponível"

    if address.logradouro:
        parts = [address.logradouro_completo(), address.bairro_completo(), address.municipio]
    elif address.bairro:
        parts = [f"bairro {address.bairro_completo()}", address.municipio]
    elif address.municipio:
        parts = [address.municipio]
    else:
        return "Localização detectada, mas endereço não disponível"

    return "Você está em " + ", ".join(part for part in parts if part)


class AddressAnnouncer:
    """
    Observador que transforma endereços e mudanças em anúncios

    Recebe notificações do ReverseGeocoder
    ``(raw, standardized, event, loading, error)`` e do
    ChangeDetectionCoordinator ``(address, change_type, None, details)``.
    Anúncios gerados no mesmo ciclo do event loop são entregues ao
    notificador em ordem de prioridade (município, bairro, logradouro,
    endereço completo).
    """

    def __init__(self, notifier: Notifier) -> None:
        self.notifier = notifier
        self._queue: list[tuple[int, int, Announcement]] = []
        self._counter = itertools.count()
        self._flush_scheduled = False

    @property
    def pending(self) -> int:
        return len(self._queue)

    def update(
        self,
        address: Any,
        standardized_or_change: Any = None,
        pos_event: Any = None,
        loading_or_details: Any = None,
        error: Any = None,
    ) -> None:
        if isinstance(standardized_or_change, ChangeType):
            self._announce_change(address, standardized_or_change, loading_or_details)
            return

        if error is not None or address is None:
            return

        if pos_event == PositionEvent.CURRENT_POSITION_UPDATE:
            self.announce(
                Announcement(
                    text=build_full_address_text(standardized_or_change),
                    priority=AnnouncementPriority.FULL_ADDRESS,
                )
            )

    def _announce_change(
        self, address: Any, change_type: ChangeType, details: Optional[ChangeDetails]
    ) -> None:
        if change_type == ChangeType.MUNICIPIO:
            text = build_municipio_text(address, details)
        elif change_type == ChangeType.BAIRRO:
            text = build_bairro_text(address)
        else:
            text = build_logradouro_text(address)

        self.announce(
            Announcement(
                text=text,
                priority=_CHANGE_PRIORITIES[change_type],
                change_type=change_type.value,
            )
        )

    def announce(self, announcement: Announcement) -> None:
        """Enfileira o anúncio e agenda a entrega"""
        heapq.heappush(
            self._queue, (-int(announcement.priority), next(self._counter), announcement)
        )

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.flush()
            return

        if not self._flush_scheduled:
            self._flush_scheduled = True
            loop.call_soon(self.flush)

    def flush(self) -> int:
        """
        Entrega os anúncios pendentes, maior prioridade primeiro

        Returns:
            número de anúncios entregues
        """
        self._flush_scheduled = False
        delivered = 0
        while self._queue:
            _, _, announcement = heapq.heappop(self._queue)
            try:
                self.notifier.send(announcement)
                delivered += 1
            except Exception as e:
                logger.error(f"Failed to deliver announcement: {e}", exc_info=True)
        return delivered
