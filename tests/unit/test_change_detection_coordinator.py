"""Testes do ChangeDetectionCoordinator"""
from typing import Any

import pytest

from guia_turistico.features.geocoding.domain.enums import ChangeType
from guia_turistico.features.geocoding.domain.models import ChangeDetails
from guia_turistico.features.geocoding.services.address_data_extractor import AddressDataExtractor
from guia_turistico.features.geocoding.services.change_detection_coordinator import (
    ChangeDetectionCoordinator,
)
from guia_turistico.features.geocoding.services.reverse_geocoder import ReverseGeocoder
from guia_turistico.shared.observer.subject import ObserverSubject

from .conftest import FailingObserver, FakeFetchManager, RecordingObserver, make_position, make_response


def build(extractor: Any = None) -> tuple[ChangeDetectionCoordinator, ObserverSubject, AddressDataExtractor]:
    extractor = extractor or AddressDataExtractor()
    subject = ObserverSubject()
    geocoder = ReverseGeocoder(FakeFetchManager({}), address_data_extractor=extractor)
    coordinator = ChangeDetectionCoordinator(geocoder, subject)
    coordinator.set_address_data_extractor(extractor)
    return coordinator, subject, extractor


def test_setup_registers_handlers() -> None:
    """setup_change_detection registra os três handlers"""
    coordinator, _, extractor = build()

    coordinator.setup_change_detection()

    assert extractor.get_logradouro_change_callback() == coordinator.handle_logradouro_change
    assert extractor.get_bairro_change_callback() == coordinator.handle_bairro_change
    assert extractor.get_municipio_change_callback() == coordinator.handle_municipio_change

    coordinator.remove_all_change_detection()

    assert extractor.get_logradouro_change_callback() is None
    assert extractor.get_bairro_change_callback() is None
    assert extractor.get_municipio_change_callback() is None


def test_setup_without_extractor_is_noop() -> None:
    """Sem extractor a configuração apenas registra um aviso"""
    coordinator = ChangeDetectionCoordinator(ReverseGeocoder(), ObserverSubject())

    coordinator.setup_change_detection()
    coordinator.remove_all_change_detection()

    assert coordinator.address_data_extractor is None


def test_bairro_change_reaches_object_and_function_observers() -> None:
    """Mudança de bairro chega aos dois tipos de observador"""
    coordinator, subject, extractor = build()
    coordinator.setup_change_detection()
    position = make_position()
    coordinator.set_current_position(position)
    recorder = RecordingObserver()
    received: list[tuple] = []
    subject.subscribe(recorder)
    subject.subscribe_function(lambda *args: received.append(args))

    extractor.get_brazilian_standard_address(
        make_response(road="Rua Augusta", neighbourhood="Consolação", city="São Paulo")
    )
    extractor.get_brazilian_standard_address(
        make_response(road="Rua Augusta", neighbourhood="Jardins", city="São Paulo")
    )

    change_data, change_type, loading, details = recorder.calls[0]
    assert change_type == ChangeType.BAIRRO
    assert change_data.bairro == "Jardins"
    assert loading is None
    assert isinstance(details, ChangeDetails)

    fn_position, _, fn_change_data, fn_details = received[0]
    assert fn_position is position
    assert fn_change_data is change_data
    assert fn_details is details


@pytest.mark.parametrize(
    "handler,change_type",
    [
        ("handle_logradouro_change", ChangeType.LOGRADOURO),
        ("handle_bairro_change", ChangeType.BAIRRO),
        ("handle_municipio_change", ChangeType.MUNICIPIO),
    ],
)
def test_handlers_isolate_observer_failures(handler: str, change_type: ChangeType) -> None:
    """A falha de um observador não impede os demais"""
    coordinator, subject, _ = build()
    recorder = RecordingObserver()
    subject.subscribe(FailingObserver())
    subject.subscribe(recorder)
    subject.subscribe_function(lambda *args: 1 / 0)
    details = ChangeDetails(field="x", previous={}, current={}, has_changed=True)

    getattr(coordinator, handler)(details)

    assert recorder.calls[0][1] == change_type
