"""Modelos de domínio do posicionamento"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from ....shared.utils.geo import accuracy_quality, calculate_distance


class PositionEvent(str, Enum):
    """Eventos publicados pelo PositionManager"""

    CURRENT_POSITION_UPDATE = "PositionManager updated"  # posição aceita
    CURRENT_POSITION_NOT_UPDATE = "PositionManager not updated"  # posição rejeitada
    IMMEDIATE_ADDRESS_UPDATE = "Immediate address update"  # aceita antes do intervalo


@dataclass(frozen=True)
class Position:
    """Leitura de posição imutável"""

    latitude: float  # graus decimais
    longitude: float  # graus decimais
    accuracy: float  # metros
    timestamp: int  # epoch em milissegundos
    altitude: Optional[float] = None
    altitude_accuracy: Optional[float] = None
    heading: Optional[float] = None
    speed: Optional[float] = None

    @property
    def accuracy_quality(self) -> str:
        return accuracy_quality(self.accuracy)

    def coordinates(self) -> dict[str, float]:
        """Nova cópia das coordenadas como dicionário"""
        return {"latitude": self.latitude, "longitude": self.longitude}

    def distance_to(self, other: "Position") -> float:
        """Distância em metros até outra posição"""
        return calculate_distance(self.latitude, self.longitude, other.latitude, other.longitude)

    @classmethod
    def from_browser(cls, data: Mapping[str, Any]) -> "Position":
        """
        Cria a posição a partir do formato da Geolocation API dos navegadores

        Args:
            data: {"coords": {"latitude", "longitude", "accuracy", ...}, "timestamp"}

        Raises:
            TypeError: campos obrigatórios ausentes
        """
        coords = data.get("coords") or {}
        try:
            return cls(
                latitude=float(coords["latitude"]),
                longitude=float(coords["longitude"]),
                accuracy=float(coords["accuracy"]),
                timestamp=int(data["timestamp"]),
                altitude=coords.get("altitude"),
                altitude_accuracy=coords.get("altitudeAccuracy"),
                heading=coords.get("heading"),
                speed=coords.get("speed"),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise TypeError(f"Malformed browser position: {e}") from e

    def __str__(self) -> str:
        return (
            f"Position: {self.latitude}, {self.longitude}, {self.accuracy_quality}, "
            f"{self.altitude}, {self.speed}, {self.heading}, {self.timestamp}"
        )


@dataclass(frozen=True)
class PositionError:
    """Erro bruto informado pelo provedor de geolocalização"""

    code: int  # 1: permissão negada, 2: indisponível, 3: timeout, 0: não suportado
    message: str = ""


@dataclass(frozen=True)
class GeolocationOptions:
    """Opções repassadas ao provedor"""

    enable_high_accuracy: bool = True
    timeout_ms: int = 20000
    maximum_age_ms: int = 0  # 0: nunca usar posição em cache


@dataclass(frozen=True)
class PositionUpdateIssue:
    """Motivo anexado a uma atualização rejeitada ou imediata"""

    name: str  # AccuracyError, DistanceError, ElapseTimeError
    message: str
