"""Testes do GeocodingState"""

import pytest

from guia_turistico.features.positioning.services.geocoding_state import GeocodingState

from .conftest import make_position


def test_set_position_tracks_current_and_previous() -> None:
    """A posição atual passa a anterior na próxima atualização"""
    state = GeocodingState()
    first = make_position(-23.55, -46.63)
    second = make_position(-23.56, -46.64)

    assert state.set_position(first) is state
    state.set_position(second)

    assert state.get_current_position() is second
    assert state.get_previous_position() is first
    assert state.get_current_coordinates() == {"latitude": -23.56, "longitude": -46.64}
    assert state.has_position()


def test_set_position_rejects_non_position_without_changing_state() -> None:
    """Valor inválido gera TypeError e não altera o estado"""
    state = GeocodingState()
    position = make_position()
    state.set_position(position)

    with pytest.raises(TypeError):
        state.set_position({"latitude": 1, "longitude": 2})  # type: ignore[arg-type]

    assert state.get_current_position() is position
    assert state.get_previous_position() is None


def test_set_position_none_clears_without_notifying() -> None:
    """None limpa a posição atual sem notificar"""
    state = GeocodingState()
    received: list[dict] = []
    state.set_position(make_position())
    state.subscribe(received.append)

    state.set_position(None)

    assert not state.has_position()
    assert state.get_current_coordinates() is None
    assert received == []


def test_coordinates_are_a_copy() -> None:
    """Alterar as coordenadas devolvidas não afeta o estado"""
    state = GeocodingState()
    state.set_position(make_position(-10.0, -20.0))

    coordinates = state.get_current_coordinates()
    coordinates["latitude"] = 99.0

    assert state.get_current_coordinates() == {"latitude": -10.0, "longitude": -20.0}


def test_subscribe_notifies_and_returns_unsubscriber() -> None:
    """Callbacks recebem position e coordinates; o retorno cancela a inscrição"""
    state = GeocodingState()
    received: list[dict] = []
    unsubscribe = state.subscribe(received.append)
    position = make_position(0.0, 0.0)

    state.set_position(position)
    unsubscribe()
    state.set_position(make_position(1.0, 1.0))

    assert received == [{"position": position, "coordinates": {"latitude": 0.0, "longitude": 0.0}}]
    assert state.observer_count == 0


def test_failing_callback_does_not_stop_others() -> None:
    """A falha de um callback não impede os demais"""
    state = GeocodingState()
    received: list[dict] = []

    def failing(_: dict) -> None:
        raise RuntimeError("boom")

    state.subscribe(failing)
    state.subscribe(received.append)
    state.set_position(make_position())

    assert len(received) == 1


def test_subscribe_rejects_non_callable() -> None:
    """Callback não chamável é rejeitado"""
    with pytest.raises(TypeError):
        GeocodingState().subscribe("nope")  # type: ignore[arg-type]


def test_clear() -> None:
    """clear limpa posições e callbacks"""
    state = GeocodingState()
    state.subscribe(lambda _: None)
    state.set_position(make_position())
    state.set_position(make_position(1.0, 1.0))

    state.clear()

    assert state.get_current_position() is None
    assert state.get_previous_position() is None
    assert state.observer_count == 0
