"""Busca de respostas na API de geocodificação reversa do Nominatim"""
from typing import Any, Optional

from ....shared.exceptions.errors import HTTPError
from ....shared.http.client import HTTPClient
from ....shared.http.rate_limiter import RateLimiter
from ....shared.logging.config import get_logger

logger = get_logger(__name__)


class NominatimFetchManager:
    """
    Fetch manager para o Nominatim

    Chamadas bloqueantes (requests); o ReverseGeocoder as executa em uma
    thread de trabalho. O RateLimiter mantém o ritmo de 1 requisição por
    segundo exigido pelo serviço público.
    """

    def __init__(
        self,
        http_client: Optional[HTTPClient] = None,
        rate_limiter: Optional[RateLimiter] = None,
    ) -> None:
        """
        Args:
            http_client: cliente HTTP (padrão: HTTPClient())
            rate_limiter: limitador de taxa (padrão: 1 requisição/segundo)
        """
        self.http_client = http_client or HTTPClient()
        self.rate_limiter = rate_limiter or RateLimiter(requests_per_second=1.0)
        self.request_count = 0

    def fetch(self, url: str) -> dict[str, Any]:
        """
        Busca e decodifica a resposta JSON

        Args:
            url: URL completa da consulta

        Returns:
            resposta JSON do Nominatim

        Raises:
            NetworkError: falha de rede
            HTTPError: status de erro ou resposta inválida
        """
        self.rate_limiter.wait()
        self.request_count += 1
        data = self.http_client.get_json(url)

        if not isinstance(data, dict):
            raise HTTPError(f"Unexpected geocoding response type: {type(data).__name__}")
        if "error" in data:
            # O Nominatim responde 200 com {"error": "Unable to geocode"} fora de cobertura
            logger.warning(f"Geocoding service returned an error: {data['error']}")

        return data

    def close(self) -> None:
        self.http_client.close()
