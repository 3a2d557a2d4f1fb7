"""Provedor que reproduz um trajeto gravado em arquivo YAML"""
import asyncio
import time
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from tqdm import tqdm

from ....shared.exceptions.errors import ConfigurationError
from ....shared.logging.config import get_logger
from ..domain.models import GeolocationOptions, Position, PositionError
from .base import ErrorCallback, GeolocationProvider, SuccessCallback

logger = get_logger(__name__)

# Intervalo simulado entre pontos quando o arquivo não informa timestamps
DEFAULT_TIME_STEP_MS = 60000


def load_route(path: Union[str, Path], start_timestamp: Optional[int] = None) -> list[Position]:
    """
    Carrega um trajeto YAML

    Formato::

        time_step_ms: 60000      # opcional
        positions:
          - latitude: -23.5505
            longitude: -46.6333
            accuracy: 8
            timestamp: 1700000000000   # opcional

    Args:
        path: caminho do arquivo
        start_timestamp: timestamp (ms) do primeiro ponto sem timestamp explícito

    Returns:
        lista de posições na ordem do arquivo

    Raises:
        ConfigurationError: arquivo ausente ou malformado
    """
    route_path = Path(path)
    try:
        with route_path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to load route file {route_path}: {e}") from e

    if isinstance(data, list):
        data = {"positions": data}

    points = data.get("positions") if isinstance(data, dict) else None
    if not points:
        raise ConfigurationError(f"Route file {route_path} has no positions")

    time_step_ms = int(data.get("time_step_ms", DEFAULT_TIME_STEP_MS))
    base_timestamp = start_timestamp if start_timestamp is not None else int(time.time() * 1000)

    positions = []
    for index, point in enumerate(points):
        try:
            positions.append(_position_from_point(point, base_timestamp + index * time_step_ms))
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid route point #{index} in {route_path}: {e}") from e

    logger.info(f"Route loaded: {len(positions)} positions from {route_path}")
    return positions


def _position_from_point(point: dict[str, Any], default_timestamp: int) -> Position:
    return Position(
        latitude=float(point["latitude"]),
        longitude=float(point["longitude"]),
        accuracy=float(point.get("accuracy", 10)),
        timestamp=int(point.get("timestamp", default_timestamp)),
        altitude=point.get("altitude"),
        heading=point.get("heading"),
        speed=point.get("speed"),
    )


class RouteGeolocationProvider(GeolocationProvider):
    """
    Reproduz uma lista de posições como se viessem de um GPS

    ``get_current_position`` entrega o ponto atual do trajeto;
    ``watch_position`` entrega os pontos restantes, um a cada
    ``interval`` segundos (tempo real), em uma task do event loop.
    """

    def __init__(
        self,
        positions: list[Position],
        interval: float = 1.0,
        show_progress: bool = False,
    ) -> None:
        """
        Args:
            positions: trajeto
            interval: intervalo real entre entregas (segundos)
            show_progress: exibe barra de progresso (tqdm)
        """
        self.positions = positions
        self.interval = interval
        self.show_progress = show_progress

        self.cursor = 0
        self.finished = asyncio.Event()
        self._watch_tasks: dict[int, asyncio.Task] = {}
        self._watch_id_counter = 0

    def get_current_position(
        self,
        on_success: SuccessCallback,
        on_error: ErrorCallback,
        options: GeolocationOptions,
    ) -> None:
        if not self.positions:
            on_error(PositionError(2, "Route is empty"))
            return
        index = min(self.cursor, len(self.positions) - 1)
        on_success(self.positions[index])

    def watch_position(
        self,
        on_success: SuccessCallback,
        on_error: ErrorCallback,
        options: GeolocationOptions,
    ) -> Optional[int]:
        self._watch_id_counter += 1
        watch_id = self._watch_id_counter
        task = asyncio.get_running_loop().create_task(self._replay(on_success))
        self._watch_tasks[watch_id] = task
        return watch_id

    def clear_watch(self, watch_id: int) -> None:
        task = self._watch_tasks.pop(watch_id, None)
        if task is not None and not task.done():
            task.cancel()

    def is_supported(self) -> bool:
        return True

    async def _replay(self, on_success: SuccessCallback) -> None:
        remaining = self.positions[self.cursor:]
        iterator = tqdm(remaining, desc="Trajeto", unit="pt") if self.show_progress else remaining

        for position in iterator:
            on_success(position)
            self.cursor += 1
            # Também após o último ponto: a entrega é agendada no loop
            await asyncio.sleep(self.interval)

        logger.info(f"Route replay finished: {self.cursor} positions delivered")
        self.finished.set()
