"""Testes do GeolocationService"""
import asyncio

import pytest

from guia_turistico.features.positioning.domain.models import PositionError, PositionEvent
from guia_turistico.features.positioning.providers.mock_provider import MockGeolocationProvider
from guia_turistico.features.positioning.services.geolocation_service import (
    GeolocationService,
    format_geolocation_error,
    geolocation_error_message,
)
from guia_turistico.features.positioning.services.position_manager import PositionManager
from guia_turistico.shared.exceptions.errors import (
    GeolocationTimeoutError,
    NotSupportedError,
    PermissionDeniedError,
    PositionUnavailableError,
    RequestPendingError,
    UnknownGeolocationError,
)

from .conftest import RecordingObserver, make_position


def make_service(provider: MockGeolocationProvider) -> GeolocationService:
    return GeolocationService(provider, PositionManager())


@pytest.mark.asyncio
async def test_single_update_feeds_position_manager() -> None:
    """A posição obtida segue para o PositionManager"""
    position = make_position()
    provider = MockGeolocationProvider(default_position=position)
    service = make_service(provider)
    observer = RecordingObserver()
    service.position_manager.subscribe(observer)
    received: list = []
    service.on_position = received.append

    result = await service.get_single_location_update()

    assert result is position
    assert service.last_known_position is position
    assert service.get_last_known_position() is position
    assert observer.calls[0][1] == PositionEvent.CURRENT_POSITION_UPDATE
    assert received == [position]
    assert not service.has_pending_request()


@pytest.mark.asyncio
async def test_concurrent_request_is_rejected_without_affecting_first() -> None:
    """Segunda requisição simultânea gera RequestPendingError"""
    position = make_position()
    provider = MockGeolocationProvider(default_position=position, delay=0.01)
    service = make_service(provider)

    first = asyncio.create_task(service.get_single_location_update())
    await asyncio.sleep(0)

    with pytest.raises(RequestPendingError):
        await service.get_single_location_update()

    assert await first is position
    assert provider.get_current_position_calls == 1
    assert not service.has_pending_request()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "code,error_type",
    [
        (1, PermissionDeniedError),
        (2, PositionUnavailableError),
        (3, GeolocationTimeoutError),
        (99, UnknownGeolocationError),
    ],
)
async def test_provider_errors_are_typed(code: int, error_type: type) -> None:
    """Erros do provedor viram exceções tipadas"""
    provider = MockGeolocationProvider(default_error=PositionError(code, "failure"))
    service = make_service(provider)

    with pytest.raises(error_type) as exc_info:
        await service.get_single_location_update()

    assert exc_info.value.code == code
    assert exc_info.value.original_error == PositionError(code, "failure")
    assert not service.has_pending_request()


@pytest.mark.asyncio
async def test_unsupported_provider() -> None:
    """Provedor indisponível gera NotSupportedError"""
    provider = MockGeolocationProvider(supported=False)
    service = make_service(provider)

    with pytest.raises(NotSupportedError):
        await service.get_single_location_update()

    assert service.watch_current_location() is None
    assert provider.get_current_position_calls == 0


@pytest.mark.asyncio
async def test_watch_is_idempotent_and_delivers_positions() -> None:
    """watch_current_location não duplica o watch"""
    position = make_position()
    provider = MockGeolocationProvider(default_position=position)
    service = make_service(provider)

    first_id = service.watch_current_location()
    second_id = service.watch_current_location()
    await asyncio.sleep(0.01)

    assert first_id == second_id
    assert provider.watch_position_calls == 1
    assert service.is_watching
    assert service.position_manager.last_position is position


@pytest.mark.asyncio
async def test_stop_watching() -> None:
    """stop_watching cancela o watch no provedor"""
    provider = MockGeolocationProvider(default_position=make_position())
    service = make_service(provider)

    watch_id = service.watch_current_location()
    service.stop_watching()

    assert watch_id not in provider.active_watches
    assert service.watch_id is None
    assert not service.is_watching

    # Sem watch ativo: nada acontece
    service.stop_watching()


def test_watch_errors_are_logged_not_raised() -> None:
    """Erros do watch são apenas registrados"""
    provider = MockGeolocationProvider(default_position=make_position())
    service = make_service(provider)
    service.watch_current_location()

    provider.trigger_watch_error(PositionError(3, "timeout"))

    assert service.is_watching
    assert service.position_manager.last_position is not None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "permission_state,expected",
    [
        (None, "prompt"),
        ("granted", "granted"),
        ("denied", "denied"),
        ("weird", "prompt"),
    ],
)
async def test_check_permissions(permission_state: str, expected: str) -> None:
    """Estado da permissão com fallback para prompt"""
    service = make_service(MockGeolocationProvider(permission_state=permission_state))

    assert await service.check_permissions() == expected


@pytest.mark.parametrize(
    "code,message",
    [
        (1, "Permissão negada pelo usuário"),
        (2, "Posição indisponível"),
        (3, "Timeout na obtenção da posição"),
        (None, "Erro desconhecido"),
    ],
)
def test_geolocation_error_message(code: int, message: str) -> None:
    """Mensagens para o usuário por código"""
    assert geolocation_error_message(code) == message


def test_format_geolocation_error_keeps_timeout_distinct_from_builtin() -> None:
    """GeolocationTimeoutError não é o TimeoutError embutido"""
    error = format_geolocation_error(PositionError(3))
    assert isinstance(error, GeolocationTimeoutError)
    assert not isinstance(error, TimeoutError)
