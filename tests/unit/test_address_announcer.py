"""Testes do AddressAnnouncer"""
import asyncio
import io

import pytest

from guia_turistico.features.geocoding.domain.enums import ADDRESS_FETCHED_EVENT, ChangeType
from guia_turistico.features.geocoding.domain.models import BrazilianStandardAddress, ChangeDetails
from guia_turistico.features.notifications.domain.models import Announcement, AnnouncementPriority
from guia_turistico.features.notifications.providers.console_notifier import ConsoleNotifier
from guia_turistico.features.notifications.services.address_announcer import (
    AddressAnnouncer,
    build_bairro_text,
    build_full_address_text,
    build_logradouro_text,
    build_municipio_text,
)
from guia_turistico.features.positioning.domain.models import PositionEvent


class ListNotifier:
    def __init__(self) -> None:
        self.sent: list[Announcement] = []

    def send(self, announcement: Announcement) -> None:
        self.sent.append(announcement)


ADDRESS = BrazilianStandardAddress(
    logradouro="Avenida Paulista",
    numero="1578",
    bairro="Bela Vista",
    municipio="São Paulo",
    sigla_uf="SP",
)


@pytest.mark.parametrize(
    "address,expected",
    [
        (ADDRESS, "Você está em Avenida Paulista, 1578, Bela Vista, São Paulo"),
        (BrazilianStandardAddress(bairro="Sé", municipio="São Paulo"), "Você está em bairro Sé, São Paulo"),
        (BrazilianStandardAddress(municipio="Santos"), "Você está em Santos"),
        (BrazilianStandardAddress(), "Localização detectada, mas endereço não disponível"),
        (None, "Localização não disponível"),
    ],
)
def test_build_full_address_text(address: BrazilianStandardAddress, expected: str) -> None:
    """Texto do endereço completo por nível de detalhe"""
    assert build_full_address_text(address) == expected


def test_change_texts() -> None:
    """Textos de mudança de logradouro, bairro e município"""
    details = ChangeDetails(
        field="municipio",
        previous={"municipio": "Guarulhos", "uf": "São Paulo"},
        current={"municipio": "São Paulo", "uf": "São Paulo"},
        has_changed=True,
    )

    assert build_logradouro_text(ADDRESS) == "Você está agora em Avenida Paulista, 1578"
    assert build_bairro_text(ADDRESS) == "Você entrou no bairro Bela Vista"
    assert build_municipio_text(ADDRESS, details) == "Você saiu de Guarulhos e entrou em São Paulo"
    assert build_municipio_text(ADDRESS) == "Você entrou no município de São Paulo"
    assert build_municipio_text(None) == "Novo município detectado"
    assert build_bairro_text(BrazilianStandardAddress()) == "Novo bairro detectado"
    assert build_logradouro_text(None) == "Nova localização detectada"


def test_full_address_only_on_periodic_update() -> None:
    """Endereço completo apenas em CURRENT_POSITION_UPDATE sem erro"""
    notifier = ListNotifier()
    announcer = AddressAnnouncer(notifier)

    announcer.update({"address": {}}, ADDRESS, PositionEvent.CURRENT_POSITION_UPDATE, False, None)
    announcer.update({"address": {}}, ADDRESS, PositionEvent.IMMEDIATE_ADDRESS_UPDATE, False, None)
    announcer.update({"address": {}}, ADDRESS, ADDRESS_FETCHED_EVENT, False, None)
    announcer.update(None, None, PositionEvent.CURRENT_POSITION_UPDATE, False, RuntimeError("x"))

    assert [a.priority for a in notifier.sent] == [AnnouncementPriority.FULL_ADDRESS]


@pytest.mark.asyncio
async def test_announcements_in_same_cycle_are_ordered_by_priority() -> None:
    """Anúncios do mesmo ciclo saem do mais prioritário ao menos"""
    notifier = ListNotifier()
    announcer = AddressAnnouncer(notifier)

    announcer.update({"address": {}}, ADDRESS, PositionEvent.CURRENT_POSITION_UPDATE, False, None)
    announcer.update(ADDRESS, ChangeType.LOGRADOURO, None, None)
    announcer.update(ADDRESS, ChangeType.MUNICIPIO, None, None)
    announcer.update(ADDRESS, ChangeType.BAIRRO, None, None)
    assert announcer.pending == 4

    await asyncio.sleep(0)

    assert [a.change_type for a in notifier.sent] == [
        "MunicipioChanged",
        "BairroChanged",
        "LogradouroChanged",
        None,
    ]
    assert announcer.pending == 0


def test_failing_notifier_does_not_stop_delivery() -> None:
    """Falha na entrega de um anúncio não impede os demais"""

    class FlakyNotifier(ListNotifier):
        def send(self, announcement: Announcement) -> None:
            if announcement.priority == AnnouncementPriority.MUNICIPIO:
                raise RuntimeError("down")
            super().send(announcement)

    notifier = FlakyNotifier()
    announcer = AddressAnnouncer(notifier)

    announcer.announce(Announcement("a", AnnouncementPriority.MUNICIPIO))
    announcer.announce(Announcement("b", AnnouncementPriority.BAIRRO))

    assert [a.text for a in notifier.sent] == ["b"]


def test_console_notifier_writes_line() -> None:
    """ConsoleNotifier escreve o anúncio com o marcador"""
    stream = io.StringIO()
    notifier = ConsoleNotifier(stream=stream, show_timestamp=False)

    notifier.send(Announcement("Você entrou no bairro Sé", AnnouncementPriority.BAIRRO))

    assert stream.getvalue() == "🏘️ Você entrou no bairro Sé\n"
    assert len(notifier.sent) == 1
