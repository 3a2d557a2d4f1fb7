"""Ponto de entrada da CLI"""
import argparse
import asyncio
import sys
from typing import Optional

from .features.app.orchestrator import GuiaOrchestrator
from .features.positioning.providers.route_provider import RouteGeolocationProvider, load_route
from .infrastructure.config.settings import Settings
from .shared.logging.config import get_logger, setup_logging

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="guia-turistico",
        description="Guia turístico: endereço brasileiro a partir da posição",
    )

    parser.add_argument(
        "--lat",
        type=float,
        help="Latitude para geocodificação reversa avulsa",
    )

    parser.add_argument(
        "--lon",
        type=float,
        help="Longitude para geocodificação reversa avulsa",
    )

    parser.add_argument(
        "--route",
        type=str,
        help="Arquivo YAML de trajeto a ser reproduzido",
    )

    parser.add_argument(
        "--interval",
        type=float,
        help="Intervalo entre pontos do trajeto em segundos (padrão: configuração)",
    )

    parser.add_argument(
        "--env-file",
        type=str,
        default=".env",
        help="Caminho do arquivo de variáveis de ambiente (padrão: .env)",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Nível de log",
    )

    return parser


async def run_geocode(settings: Settings, latitude: float, longitude: float) -> None:
    """Geocodifica um par de coordenadas e escreve o endereço"""
    async with GuiaOrchestrator(settings) as orchestrator:
        address = await orchestrator.geocode(latitude, longitude)

    if address is None or not address.endereco_completo():
        print("Endereço não disponível")
        return

    print(address.endereco_completo())
    if address.regiao_metropolitana:
        print(address.regiao_metropolitana)
    if address.reference_place is not None and address.reference_place.class_name:
        print(f"Referência: {address.reference_place.description}")


async def run_route(settings: Settings, route_file: str, interval: Optional[float]) -> None:
    """Reproduz um trajeto pelo caminho de acompanhamento contínuo"""
    positions = load_route(route_file)
    provider = RouteGeolocationProvider(
        positions,
        interval=interval if interval is not None else settings.route_interval_seconds,
        show_progress=True,
    )

    async with GuiaOrchestrator(settings, provider=provider) as orchestrator:
        orchestrator.start_tracking()
        await provider.finished.wait()


def main(argv: Optional[list[str]] = None) -> int:
    """
    Ponto de entrada principal

    Returns:
        int: código de saída (0: sucesso, 1: falha, 130: interrompido)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.route is None and (args.lat is None or args.lon is None):
        parser.error("either --route or both --lat and --lon are required")

    try:
        settings = Settings(_env_file=args.env_file)

        if args.log_level:
            settings.log_level = args.log_level

        setup_logging(level=settings.log_level)

        logger.info(f"Starting {settings.project_name} ({settings.environment})")

        if args.route is not None:
            asyncio.run(run_route(settings, args.route, args.interval))
        else:
            asyncio.run(run_geocode(settings, args.lat, args.lon))

        logger.info("Completed successfully")
        return 0

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130  # SIGINT
    except Exception as e:
        logger.error(f"Application failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
