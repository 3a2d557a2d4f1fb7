"""Coordenação das notificações de mudança de logradouro, bairro e município"""
from typing import Any, Optional

from ....shared.logging.config import get_logger
from ....shared.observer.subject import ObserverSubject
from ...positioning.domain.models import Position
from ..domain.enums import ChangeType
from ..domain.models import BrazilianStandardAddress, ChangeDetails
from .address_data_extractor import AddressDataExtractor
from .reverse_geocoder import ReverseGeocoder

logger = get_logger(__name__)


class ChangeDetectionCoordinator:
    """
    Registra handlers de mudança no AddressDataExtractor e repassa cada
    mudança aos observadores

    Observadores-objeto recebem ``update(change_data, change_type, None, details)``;
    observadores-função recebem ``fn(position, raw_address, standardized_address, details)``.
    """

    def __init__(self, reverse_geocoder: ReverseGeocoder, observer_subject: ObserverSubject) -> None:
        self.reverse_geocoder = reverse_geocoder
        self.observer_subject = observer_subject
        self.current_position: Optional[Position] = None
        self.address_data_extractor: Optional[AddressDataExtractor] = None

    def set_address_data_extractor(self, extractor: Optional[AddressDataExtractor]) -> None:
        self.address_data_extractor = extractor

    def set_current_position(self, position: Optional[Position]) -> None:
        self.current_position = position

    def setup_change_detection(self) -> None:
        self.setup_logradouro_change_detection()
        self.setup_bairro_change_detection()
        self.setup_municipio_change_detection()

    def remove_all_change_detection(self) -> None:
        self.remove_logradouro_change_detection()
        self.remove_bairro_change_detection()
        self.remove_municipio_change_detection()

    def setup_logradouro_change_detection(self) -> None:
        if self._extractor_missing():
            return
        self.address_data_extractor.set_logradouro_change_callback(self.handle_logradouro_change)

    def setup_bairro_change_detection(self) -> None:
        if self._extractor_missing():
            return
        self.address_data_extractor.set_bairro_change_callback(self.handle_bairro_change)

    def setup_municipio_change_detection(self) -> None:
        if self._extractor_missing():
            return
        self.address_data_extractor.set_municipio_change_callback(self.handle_municipio_change)

    def remove_logradouro_change_detection(self) -> None:
        if self.address_data_extractor is not None:
            self.address_data_extractor.set_logradouro_change_callback(None)

    def remove_bairro_change_detection(self) -> None:
        if self.address_data_extractor is not None:
            self.address_data_extractor.set_bairro_change_callback(None)

    def remove_municipio_change_detection(self) -> None:
        if self.address_data_extractor is not None:
            self.address_data_extractor.set_municipio_change_callback(None)

    def _extractor_missing(self) -> bool:
        if self.address_data_extractor is None:
            logger.warning("AddressDataExtractor not available, change detection not set up")
            return True
        return False

    def handle_logradouro_change(self, details: ChangeDetails) -> None:
        try:
            self._notify_address_change_observers(
                details, ChangeType.LOGRADOURO, self._change_data(details), None
            )
        except Exception as e:
            logger.error(f"Error handling logradouro change: {e}", exc_info=True)

    def handle_bairro_change(self, details: ChangeDetails) -> None:
        try:
            self._notify_address_change_observers(
                details,
                ChangeType.BAIRRO,
                self._change_data(details),
                "Notifying observers of bairro change",
            )
        except Exception as e:
            logger.error(f"Error handling bairro change: {e}", exc_info=True)

    def handle_municipio_change(self, details: ChangeDetails) -> None:
        try:
            self._notify_address_change_observers(
                details,
                ChangeType.MUNICIPIO,
                self._change_data(details),
                "Notifying observers of municipio change",
            )
        except Exception as e:
            logger.error(f"Error handling municipio change: {e}", exc_info=True)

    def _change_data(self, details: ChangeDetails) -> Optional[BrazilianStandardAddress]:
        # O handler roda durante a padronização: o endereço novo está nos detalhes
        return details.current_address or self.reverse_geocoder.standardized_address

    def _notify_address_change_observers(
        self,
        details: ChangeDetails,
        change_type: ChangeType,
        change_data: Any,
        log_message: Optional[str],
    ) -> None:
        if log_message:
            logger.info(log_message)

        for observer in self.observer_subject.observers:
            try:
                observer.update(change_data, change_type, None, details)
            except Exception as e:
                logger.error(f"Error notifying observer about {change_type.value}: {e}", exc_info=True)

        for fn in self.observer_subject.function_observers:
            try:
                fn(
                    self.current_position,
                    self.reverse_geocoder.current_address,
                    change_data,
                    details,
                )
            except Exception as e:
                logger.error(
                    f"Error notifying function observer about {change_type.value}: {e}",
                    exc_info=True,
                )
