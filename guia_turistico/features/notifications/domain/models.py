"""Modelos de domínio dos anúncios"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Any, Optional


class AnnouncementPriority(IntEnum):
    """Prioridade do anúncio (maior vence)"""

    FULL_ADDRESS = 0  # atualização periódica do endereço completo
    LOGRADOURO = 1
    BAIRRO = 2
    MUNICIPIO = 3


@dataclass
class Announcement:
    """Texto a ser anunciado ao usuário"""

    text: str
    priority: AnnouncementPriority
    change_type: Optional[str] = None  # LogradouroChanged, BairroChanged, MunicipioChanged
    timestamp: datetime = field(default_factory=datetime.now)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def emoji(self) -> str:
        """Marcador visual conforme a prioridade"""
        emoji_map = {
            AnnouncementPriority.FULL_ADDRESS: "📍",
            AnnouncementPriority.LOGRADOURO: "🛣️",
            AnnouncementPriority.BAIRRO: "🏘️",
            AnnouncementPriority.MUNICIPIO: "🏙️",
        }
        return emoji_map.get(self.priority, "📢")

    def __str__(self) -> str:
        return f"{self.emoji} {self.text}"
