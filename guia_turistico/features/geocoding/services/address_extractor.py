"""Padronização de respostas do Nominatim no formato de endereço brasileiro"""
import re
from typing import Any, Mapping, Optional

from ..domain.enums import BrazilianState
from ..domain.models import BrazilianStandardAddress, ReferencePlace

# Ordem de prioridade das chaves do objeto "address" para cada campo
LOGRADOURO_KEYS = ("addr:street", "road", "street", "pedestrian")
NUMERO_KEYS = ("addr:housenumber", "house_number")
BAIRRO_KEYS = ("addr:neighbourhood", "neighbourhood", "suburb", "quarter")
MUNICIPIO_KEYS = (
    "addr:city",
    "city",
    "town",
    "municipality",
    "village",
    "city_district",
)
UF_KEYS = ("addr:state", "state")
CEP_KEYS = ("addr:postcode", "postcode")

_ISO_STATE_PATTERN = re.compile(r"^BR-([A-Z]{2})$")
_SIGLA_PATTERN = re.compile(r"^[A-Z]{2}$")
_METROPOLITAN_PATTERN = re.compile(r"regi[aã]o metropolitana", re.IGNORECASE)


def first_present(address: Mapping[str, Any], keys: tuple[str, ...]) -> Optional[str]:
    """Primeiro valor não vazio entre as chaves, ou None"""
    for key in keys:
        value = address.get(key)
        if value:
            return str(value)
    return None


def extract_sigla_uf(iso3166_code: Optional[str]) -> Optional[str]:
    """
    Extrai a sigla da UF de um código ISO 3166-2

    >>> extract_sigla_uf("BR-SP")
    'SP'
    """
    if not iso3166_code or not isinstance(iso3166_code, str):
        return None
    match = _ISO_STATE_PATTERN.match(iso3166_code.strip())
    return match.group(1) if match else None


def standardize_address(data: Optional[Mapping[str, Any]]) -> BrazilianStandardAddress:
    """
    Converte uma resposta bruta do Nominatim em BrazilianStandardAddress

    Campos ausentes na resposta resultam em None. Respostas sem o objeto
    "address" resultam em um endereço vazio.

    Args:
        data: resposta JSON do Nominatim (não é alterada)

    Returns:
        BrazilianStandardAddress: endereço padronizado
    """
    if not data or not isinstance(data.get("address"), Mapping):
        return BrazilianStandardAddress()

    address = data["address"]

    uf = first_present(address, UF_KEYS)
    sigla_uf = address.get("state_code") or extract_sigla_uf(address.get("ISO3166-2-lvl4"))
    if uf and _SIGLA_PATTERN.match(uf):
        sigla_uf = uf
    if not sigla_uf:
        state = BrazilianState.from_name(uf)
        sigla_uf = state.value if state else None

    country = address.get("country")
    pais = "Brasil" if country in (None, "", "Brasil", "Brazil") else country

    county = address.get("county")
    regiao_metropolitana = county if county and _METROPOLITAN_PATTERN.search(county) else None

    return BrazilianStandardAddress(
        logradouro=first_present(address, LOGRADOURO_KEYS),
        numero=first_present(address, NUMERO_KEYS),
        bairro=first_present(address, BAIRRO_KEYS),
        municipio=first_present(address, MUNICIPIO_KEYS),
        regiao_metropolitana=regiao_metropolitana,
        uf=uf,
        sigla_uf=sigla_uf,
        cep=first_present(address, CEP_KEYS),
        pais=pais,
        reference_place=ReferencePlace.from_raw(data),
    )


def compute_bairro_completo(data: Optional[Mapping[str, Any]]) -> Optional[str]:
    """
    Bairro completo a partir da resposta bruta

    Com neighbourhood e suburb distintos devolve "neighbourhood, suburb".
    """
    if not data or not isinstance(data.get("address"), Mapping):
        return None

    address = data["address"]
    neighbourhood = address.get("neighbourhood") or None
    suburb = address.get("suburb") or None
    if neighbourhood and suburb and neighbourhood != suburb:
        return f"{neighbourhood}, {suburb}"
    return neighbourhood or suburb or address.get("quarter") or None


def generate_cache_key(data: Optional[Mapping[str, Any]]) -> Optional[str]:
    """
    Chave de cache a partir dos componentes do endereço

    Returns:
        "rua|numero|bairro|cidade|cep|pais", omitindo partes vazias,
        ou None quando não há componentes
    """
    if not data or not isinstance(data.get("address"), Mapping):
        return None

    address = data["address"]
    components = [
        address.get("road") or address.get("street") or "",
        address.get("house_number") or "",
        address.get("neighbourhood") or address.get("suburb") or "",
        address.get("city") or address.get("town") or address.get("municipality") or "",
        address.get("postcode") or "",
        address.get("country_code") or "",
    ]
    key = "|".join(str(c) for c in components if str(c).strip())
    return key or None
