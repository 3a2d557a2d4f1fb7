"""Fixtures compartilhadas dos testes unitários"""
import asyncio
from typing import Any, Optional

import pytest

from guia_turistico.features.positioning.domain.models import Position


def make_position(
    latitude: float = -23.5505,
    longitude: float = -46.6333,
    accuracy: float = 8.0,
    timestamp: int = 1_700_000_000_000,
) -> Position:
    return Position(latitude=latitude, longitude=longitude, accuracy=accuracy, timestamp=timestamp)


def make_response(**address: Any) -> dict[str, Any]:
    """Resposta mínima do Nominatim com o objeto address informado"""
    return {
        "place_id": 1,
        "lat": "-23.5505",
        "lon": "-46.6333",
        "class": "highway",
        "type": "residential",
        "address": address,
    }


class RecordingObserver:
    """Observador-objeto que registra todas as chamadas"""

    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []

    def update(self, *args: Any) -> None:
        self.calls.append(args)


class FailingObserver:
    def update(self, *args: Any) -> None:
        raise RuntimeError("observer failure")


class FakeFetchManager:
    """Fetch manager síncrono com respostas fixas por ordem de chamada"""

    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses)
        self.urls: list[str] = []

    def fetch(self, url: str) -> Any:
        self.urls.append(url)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


class ControlledFetchManager:
    """
    Fetch manager assíncrono cuja resposta só é liberada pelo teste

    ``release(index, response)`` conclui a i-ésima chamada.
    """

    def __init__(self) -> None:
        self.urls: list[str] = []
        self.futures: list[asyncio.Future] = []

    async def fetch(self, url: str) -> Any:
        self.urls.append(url)
        future = asyncio.get_running_loop().create_future()
        self.futures.append(future)
        return await future

    def release(self, index: int, response: Any) -> None:
        if isinstance(response, Exception):
            self.futures[index].set_exception(response)
        else:
            self.futures[index].set_result(response)


@pytest.fixture
def sao_paulo_response() -> dict[str, Any]:
    return {
        "place_id": 298370153,
        "osm_type": "way",
        "lat": "-23.5505199",
        "lon": "-46.6333094",
        "class": "highway",
        "type": "pedestrian",
        "name": "Praça da Sé",
        "address": {
            "road": "Praça da Sé",
            "neighbourhood": "Sé",
            "suburb": "Sé",
            "city_district": "Sé",
            "city": "São Paulo",
            "municipality": "Região Imediata de São Paulo",
            "county": "Região Metropolitana de São Paulo",
            "state": "São Paulo",
            "ISO3166-2-lvl4": "BR-SP",
            "postcode": "01001-000",
            "country": "Brasil",
            "country_code": "br",
        },
        "boundingbox": ["-23.5510", "-23.5500", "-46.6340", "-46.6325"],
    }


@pytest.fixture
def mairipora_response() -> dict[str, Any]:
    return {
        "place_id": 161238540,
        "osm_type": "node",
        "lat": "-23.3182",
        "lon": "-46.5869",
        "class": "shop",
        "type": "car_repair",
        "name": "Auto Center",
        "address": {
            "road": "Avenida Dona Charlotte Izirmai",
            "neighbourhood": "Estância Santo Antônio",
            "suburb": "Capoavinha",
            "city_district": "Mairiporã",
            "town": "Mairiporã",
            "municipality": "Região Imediata de São Paulo",
            "county": "Região Metropolitana de São Paulo",
            "state": "São Paulo",
            "ISO3166-2-lvl4": "BR-SP",
            "postcode": "07600-072",
            "country": "Brasil",
            "country_code": "br",
        },
    }


@pytest.fixture
def position() -> Position:
    return make_position()


def latest(observer: RecordingObserver) -> Optional[tuple[Any, ...]]:
    return observer.calls[-1] if observer.calls else None
