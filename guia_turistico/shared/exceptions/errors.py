"""Definição das exceções da aplicação"""
from typing import Any, Optional


class GuiaError(Exception):
    """Exceção base do Guia Turístico"""

    pass


class ConfigurationError(GuiaError):
    """Erro de configuração"""

    pass


class HTTPError(GuiaError):
    """Erro de requisição HTTP"""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NetworkError(HTTPError):
    """Falha de rede: sem resposta do servidor (conexão recusada, DNS, bloqueio)"""

    pass


class GeocodingError(GuiaError):
    """Erro de geocodificação reversa"""

    pass


class InvalidCoordinatesError(GeocodingError, ValueError):
    """Coordenadas ausentes ou inválidas"""

    def __init__(self, message: str = "Invalid coordinates") -> None:
        super().__init__(message)


class GeolocationError(GuiaError):
    """
    Erro de geolocalização

    Attributes:
        code: código numérico do provedor (1, 2, 3; 0 para indisponível)
        original_error: erro bruto recebido do provedor
    """

    code: int = 0
    default_message = "Unknown geolocation error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[int] = None,
        original_error: Any = None,
    ) -> None:
        super().__init__(message or self.default_message)
        if code is not None:
            self.code = code
        self.original_error = original_error


class NotSupportedError(GeolocationError):
    """Geolocalização não suportada pelo provedor"""

    default_message = "Geolocation is not supported by this provider"


class RequestPendingError(GeolocationError):
    """Já existe uma requisição de posição em andamento"""

    default_message = "A geolocation request is already pending"


class PermissionDeniedError(GeolocationError):
    """Permissão de localização negada (código 1)"""

    code = 1
    default_message = "User denied geolocation permission"


class PositionUnavailableError(GeolocationError):
    """Posição indisponível (código 2)"""

    code = 2
    default_message = "Position information is unavailable"


class GeolocationTimeoutError(GeolocationError):
    """Tempo esgotado na obtenção da posição (código 3)"""

    code = 3
    default_message = "Geolocation request timed out"


class UnknownGeolocationError(GeolocationError):
    """Erro de geolocalização desconhecido"""

    pass
