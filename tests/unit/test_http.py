"""Testes do cliente HTTP, do RateLimiter e dos fetch managers"""
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Optional

import pytest
import requests

from guia_turistico.features.geocoding.providers.cache_fetch_manager import CacheFetchManager
from guia_turistico.features.geocoding.providers.nominatim_fetch_manager import NominatimFetchManager
from guia_turistico.shared.cache.lru_cache import LRUCache
from guia_turistico.shared.exceptions.errors import HTTPError, NetworkError
from guia_turistico.shared.http.client import HTTPClient, redact_url
from guia_turistico.shared.http.rate_limiter import RateLimiter

URL = "https://nominatim.openstreetmap.org/reverse?format=json&lat=-23.5505&lon=-46.6333"


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, invalid_json: bool = False) -> None:
        self.status_code = status_code
        self.ok = status_code < 400
        self._payload = payload
        self._invalid_json = invalid_json

    def json(self) -> Any:
        if self._invalid_json:
            raise ValueError("Expecting value")
        return self._payload


class FakeSession:
    def __init__(self, response: Optional[FakeResponse] = None, error: Optional[Exception] = None) -> None:
        self.response = response
        self.error = error
        self.calls: list[tuple[str, dict]] = []
        self.closed = False

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response

    def close(self) -> None:
        self.closed = True


class FakeTime:
    def __init__(self) -> None:
        self.now = 100.0
        self.sleeps: list[float] = []

    def clock(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class CountingFetchManager:
    def __init__(self) -> None:
        self.calls = 0
        self.closed = False

    def fetch(self, url: str) -> dict[str, Any]:
        self.calls += 1
        return {"address": {"road": "Rua A"}, "url": url}

    def close(self) -> None:
        self.closed = True


def test_get_json_returns_payload() -> None:
    """Resposta 200 é decodificada"""
    session = FakeSession(FakeResponse(200, {"place_id": 1}))
    client = HTTPClient(timeout=3, session=session)

    assert client.get_json(URL) == {"place_id": 1}
    assert session.calls[0][1]["timeout"] == 3


def test_error_status_raises_http_error() -> None:
    """Status de erro gera HTTPError com o código"""
    client = HTTPClient(session=FakeSession(FakeResponse(429)))

    with pytest.raises(HTTPError) as exc_info:
        client.get(URL)

    assert exc_info.value.status_code == 429
    assert str(exc_info.value) == "HTTP error! status: 429"


def test_connection_error_raises_network_error_without_coordinates() -> None:
    """Falha de conexão gera NetworkError sem expor as coordenadas"""
    client = HTTPClient(session=FakeSession(error=requests.ConnectionError("refused")))

    with pytest.raises(NetworkError) as exc_info:
        client.get(URL)

    message = str(exc_info.value)
    assert message.startswith("Failed to fetch https://nominatim.openstreetmap.org/reverse")
    assert "-23.5505" not in message


def test_invalid_json_raises_http_error() -> None:
    """Corpo que não é JSON gera HTTPError"""
    client = HTTPClient(session=FakeSession(FakeResponse(200, invalid_json=True)))

    with pytest.raises(HTTPError) as exc_info:
        client.get_json(URL)

    assert "lat=" not in str(exc_info.value)


def test_client_context_manager_closes_session() -> None:
    """O context manager fecha a sessão"""
    session = FakeSession(FakeResponse(200, {}))
    with HTTPClient(session=session):
        pass
    assert session.closed


def test_default_session_sends_user_agent() -> None:
    """A sessão criada envia o User-Agent configurado"""
    client = HTTPClient(user_agent="guia-test/1.0")
    assert client.session.headers["User-Agent"] == "guia-test/1.0"
    client.close()


def test_redact_url() -> None:
    """A query string é removida"""
    assert redact_url(URL) == "https://nominatim.openstreetmap.org/reverse"
    assert redact_url("https://example.org/x") == "https://example.org/x"


def test_rate_limiter_waits_between_requests() -> None:
    """Intervalo mínimo entre requisições"""
    fake = FakeTime()
    limiter = RateLimiter(requests_per_second=1.0, clock=fake.clock, sleep=fake.sleep)

    assert limiter.wait() == 0.0
    fake.now += 0.25
    assert limiter.wait() == pytest.approx(0.75)
    fake.now += 2
    assert limiter.wait() == 0.0
    assert fake.sleeps == [pytest.approx(0.75)]

    limiter.reset()
    assert limiter.last_request_time is None


def test_nominatim_fetch_manager() -> None:
    """Busca com limite de taxa e validação do tipo da resposta"""
    fake = FakeTime()
    limiter = RateLimiter(clock=fake.clock, sleep=fake.sleep)
    manager = NominatimFetchManager(
        HTTPClient(session=FakeSession(FakeResponse(200, {"error": "Unable to geocode"}))), limiter
    )

    assert manager.fetch(URL) == {"error": "Unable to geocode"}
    assert manager.request_count == 1

    manager.http_client.session.response = FakeResponse(200, ["not", "a", "dict"])
    with pytest.raises(HTTPError):
        manager.fetch(URL)


def test_cache_fetch_manager_counts_hits() -> None:
    """Mesma URL é atendida pelo cache"""
    base = CountingFetchManager()
    manager = CacheFetchManager(base)

    first = manager.fetch(URL)
    second = manager.fetch(URL)
    manager.fetch(URL + "&zoom=18")

    assert first is second
    assert base.calls == 2
    assert manager.get_cache_stats() == {
        "cache_size": 2,
        "hit_count": 1,
        "miss_count": 2,
        "total_requests": 3,
        "hit_rate_percent": 33.33,
    }

    manager.clear_cache()
    assert manager.get_cache_stats()["total_requests"] == 0

    manager.close()
    assert base.closed


def test_cache_fetch_manager_rejects_async_fetch() -> None:
    """Fetch managers assíncronos não podem ser envolvidos"""

    class AsyncFetchManager:
        async def fetch(self, url: str) -> dict:
            return {}

    with pytest.raises(TypeError):
        CacheFetchManager(AsyncFetchManager())


def test_cache_fetch_manager_is_thread_safe() -> None:
    """Buscas concorrentes em threads mantêm cache e estatísticas consistentes"""
    base = CountingFetchManager()
    manager = CacheFetchManager(base, LRUCache(max_size=4, expiration_seconds=60))
    urls = [f"{URL}&n={i % 8}" for i in range(400)]

    with ThreadPoolExecutor(max_workers=8) as executor:
        results = list(executor.map(manager.fetch, urls))

    stats = manager.get_cache_stats()
    assert len(results) == 400
    assert stats["total_requests"] == 400
    assert stats["miss_count"] >= 8
    assert stats["cache_size"] <= 4
