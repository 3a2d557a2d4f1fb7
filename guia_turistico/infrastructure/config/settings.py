"""Configuração da aplicação (Pydantic Settings)"""
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Qualidades de precisão rejeitadas por tipo de dispositivo
NOT_ACCEPTED_ACCURACY_BY_DEVICE = {
    "mobile": ("medium", "bad", "very bad"),
    "desktop": ("bad", "very bad"),
}


class Settings(BaseSettings):
    """Configuração da aplicação"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Project
    project_name: str = Field(
        default="guia-turistico",
        description="Nome do projeto",
    )
    environment: str = Field(
        default="development",
        description="Ambiente (development, staging, production)",
    )

    # Nominatim
    nominatim_base_url: str = Field(
        default="https://nominatim.openstreetmap.org/reverse",
        description="Endpoint de geocodificação reversa",
    )
    nominatim_user_agent: str = Field(
        default="guia-turistico/0.1 (python-requests)",
        description="User-Agent enviado ao Nominatim (a política de uso exige identificação)",
    )
    nominatim_requests_per_second: float = Field(
        default=1.0,
        description="Máximo de requisições por segundo ao Nominatim",
    )
    http_timeout: float = Field(
        default=10,
        description="Timeout das requisições HTTP (segundos)",
    )
    http_max_retries: int = Field(
        default=2,
        description="Retentativas HTTP para erros 5xx",
    )
    response_cache_enabled: bool = Field(
        default=True,
        description="Guarda respostas do Nominatim em cache por URL",
    )
    cors_proxy: str = Field(
        default="https://api.allorigins.win/raw?url=",
        description="Prefixo do proxy usado na nova tentativa após falha de rede",
    )
    enable_cors_fallback: bool = Field(
        default=False,
        description="Tenta uma vez via proxy após falha de rede",
    )
    discard_stale_responses: bool = Field(
        default=True,
        description="Descarta respostas de geocodificação de posições antigas",
    )

    # Position tracking
    device_type: str = Field(
        default="mobile",
        description="Tipo de dispositivo (mobile, desktop); define a precisão aceita",
    )
    not_accepted_accuracy: Optional[str] = Field(
        default=None,
        description="Qualidades de precisão rejeitadas (separadas por vírgula); sobrepõe device_type",
    )
    tracking_interval_ms: int = Field(
        default=50000,
        description="Intervalo mínimo entre atualizações periódicas (ms)",
    )
    minimum_distance_change: float = Field(
        default=20.0,
        description="Deslocamento mínimo para aceitar uma nova posição (metros)",
    )
    geolocation_timeout_ms: int = Field(
        default=20000,
        description="Timeout do provedor de geolocalização (ms)",
    )
    geolocation_high_accuracy: bool = Field(
        default=True,
        description="Solicita alta precisão ao provedor",
    )
    geolocation_maximum_age_ms: int = Field(
        default=0,
        description="Idade máxima de uma posição em cache no provedor (ms)",
    )

    # Address cache
    address_cache_size: int = Field(
        default=50,
        description="Máximo de endereços padronizados em cache",
    )
    address_cache_expiration_seconds: float = Field(
        default=300.0,
        description="Validade de um endereço em cache (segundos)",
    )
    address_cache_cleanup_interval_seconds: float = Field(
        default=60.0,
        description="Intervalo da limpeza periódica do cache (segundos)",
    )

    # Route replay
    route_interval_seconds: float = Field(
        default=1.0,
        description="Intervalo entre pontos na reprodução de trajetos (segundos)",
    )

    # Announcements
    announcements_enabled: bool = Field(
        default=True,
        description="Escreve anúncios de endereço no console",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Nível de log (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    def get_not_accepted_accuracy(self) -> tuple[str, ...]:
        """Qualidades de precisão rejeitadas pelo PositionManager"""
        if self.not_accepted_accuracy is not None:
            return tuple(q.strip() for q in self.not_accepted_accuracy.split(",") if q.strip())
        return NOT_ACCEPTED_ACCURACY_BY_DEVICE.get(
            self.device_type.lower(), NOT_ACCEPTED_ACCURACY_BY_DEVICE["mobile"]
        )
