"""Enums da geocodificação"""
import unicodedata
from enum import Enum
from typing import Optional


class BrazilianState(str, Enum):
    """Unidades federativas do Brasil (sigla)"""

    AC = "AC"
    AL = "AL"
    AP = "AP"
    AM = "AM"
    BA = "BA"
    CE = "CE"
    DF = "DF"
    ES = "ES"
    GO = "GO"
    MA = "MA"
    MT = "MT"
    MS = "MS"
    MG = "MG"
    PA = "PA"
    PB = "PB"
    PR = "PR"
    PE = "PE"
    PI = "PI"
    RJ = "RJ"
    RN = "RN"
    RS = "RS"
    RO = "RO"
    RR = "RR"
    SC = "SC"
    SP = "SP"
    SE = "SE"
    TO = "TO"

    @property
    def name_pt(self) -> str:
        """Nome da unidade federativa em português"""
        return STATE_NAMES[self]

    @classmethod
    def from_code(cls, code: str) -> "BrazilianState":
        """Obtém a UF pela sigla (sem diferenciar maiúsculas)"""
        try:
            return cls(code.strip().upper())
        except ValueError:
            raise ValueError(f"Invalid state code: {code}")

    @classmethod
    def from_name(cls, name: Optional[str]) -> Optional["BrazilianState"]:
        """Obtém a UF pelo nome, ignorando acentos e maiúsculas (None se desconhecido)"""
        if not name:
            return None
        return _STATES_BY_NORMALIZED_NAME.get(_normalize(name))


class ChangeType(str, Enum):
    """Tipos de mudança de componente do endereço"""

    LOGRADOURO = "LogradouroChanged"
    BAIRRO = "BairroChanged"
    MUNICIPIO = "MunicipioChanged"


class AddressEvent(str, Enum):
    """Eventos publicados pelo ReverseGeocoder em buscas diretas"""

    ADDRESS_FETCHED = "Address fetched"
    ADDRESS_FETCH_FAILED = "Address fetch failed"


ADDRESS_FETCHED_EVENT = AddressEvent.ADDRESS_FETCHED
ADDRESS_FETCH_FAILED_EVENT = AddressEvent.ADDRESS_FETCH_FAILED


STATE_NAMES = {
    BrazilianState.AC: "Acre",
    BrazilianState.AL: "Alagoas",
    BrazilianState.AP: "Amapá",
    BrazilianState.AM: "Amazonas",
    BrazilianState.BA: "Bahia",
    BrazilianState.CE: "Ceará",
    BrazilianState.DF: "Distrito Federal",
    BrazilianState.ES: "Espírito Santo",
    BrazilianState.GO: "Goiás",
    BrazilianState.MA: "Maranhão",
    BrazilianState.MT: "Mato Grosso",
    BrazilianState.MS: "Mato Grosso do Sul",
    BrazilianState.MG: "Minas Gerais",
    BrazilianState.PA: "Pará",
    BrazilianState.PB: "Paraíba",
    BrazilianState.PR: "Paraná",
    BrazilianState.PE: "Pernambuco",
    BrazilianState.PI: "Piauí",
    BrazilianState.RJ: "Rio de Janeiro",
    BrazilianState.RN: "Rio Grande do Norte",
    BrazilianState.RS: "Rio Grande do Sul",
    BrazilianState.RO: "Rondônia",
    BrazilianState.RR: "Roraima",
    BrazilianState.SC: "Santa Catarina",
    BrazilianState.SP: "São Paulo",
    BrazilianState.SE: "Sergipe",
    BrazilianState.TO: "Tocantins",
}


def _normalize(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text.strip().lower())
    return "".join(c for c in decomposed if not unicodedata.combining(c))


_STATES_BY_NORMALIZED_NAME = {_normalize(name): state for state, name in STATE_NAMES.items()}
