"""Modelos de domínio da geocodificação"""
import dataclasses
import time
from dataclasses import asdict, dataclass
from typing import Any, Optional

NO_REFERENCE_PLACE = "Não classificado"

VALID_REFERENCE_PLACE_CLASSES = ("place", "shop", "amenity", "railway")

REFERENCE_PLACE_LABELS = {
    "place": {"house": "Residencial"},
    "shop": {"mall": "Shopping Center", "car_repair": "Oficina Mecânica"},
    "amenity": {"cafe": "Café"},
    "railway": {"subway": "Estação do Metrô", "station": "Estação do Metrô"},
}


@dataclass(frozen=True)
class ReferencePlace:
    """Local de referência (feição OSM) no ponto consultado"""

    class_name: Optional[str] = None  # "class" do Nominatim
    type_name: Optional[str] = None  # "type" do Nominatim
    name: Optional[str] = None
    description: str = NO_REFERENCE_PLACE

    @classmethod
    def from_raw(cls, data: Optional[dict[str, Any]]) -> "ReferencePlace":
        data = data or {}
        class_name = data.get("class") or None
        type_name = data.get("type") or None
        name = data.get("name") or None
        return cls(
            class_name=class_name,
            type_name=type_name,
            name=name,
            description=describe_reference_place(class_name, type_name, name),
        )

    def __str__(self) -> str:
        if self.name:
            return f"ReferencePlace: {self.description} - {self.name}"
        return f"ReferencePlace: {self.description}"


def describe_reference_place(
    class_name: Optional[str], type_name: Optional[str], name: Optional[str] = None
) -> str:
    """Descrição em português de uma feição OSM"""
    if not class_name or not type_name:
        return NO_REFERENCE_PLACE
    if class_name not in VALID_REFERENCE_PLACE_CLASSES:
        return NO_REFERENCE_PLACE

    label = REFERENCE_PLACE_LABELS.get(class_name, {}).get(type_name)
    if label is None:
        return f"{class_name}: {type_name}"
    return f"{label} {name}" if name else label


@dataclass
class BrazilianStandardAddress:
    """Endereço no padrão brasileiro"""

    logradouro: Optional[str] = None  # rua, avenida...
    numero: Optional[str] = None
    complemento: Optional[str] = None
    bairro: Optional[str] = None
    municipio: Optional[str] = None
    regiao_metropolitana: Optional[str] = None
    uf: Optional[str] = None  # nome completo do estado
    sigla_uf: Optional[str] = None  # sigla de duas letras
    cep: Optional[str] = None
    pais: str = "Brasil"
    reference_place: Optional[ReferencePlace] = None

    def logradouro_completo(self) -> str:
        """Logradouro com número ("" sem logradouro)"""
        if not self.logradouro:
            return ""
        if self.numero:
            return f"{self.logradouro}, {self.numero}"
        return self.logradouro

    def bairro_completo(self) -> str:
        return self.bairro or ""

    def municipio_completo(self) -> str:
        """Município com a sigla da UF ("" sem município)"""
        if not self.municipio:
            return ""
        if self.sigla_uf:
            return f"{self.municipio}, {self.sigla_uf}"
        return self.municipio

    def regiao_metropolitana_formatada(self) -> str:
        return self.regiao_metropolitana or ""

    def endereco_completo(self) -> str:
        """Endereço completo em uma linha, omitindo partes ausentes"""
        parts = [self.logradouro_completo(), self.bairro, self.municipio_completo(), self.cep]
        return ", ".join(part for part in parts if part)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["reference_place"] = (
            self.reference_place.description if self.reference_place else None
        )
        return data

    def __str__(self) -> str:
        return f"BrazilianStandardAddress: {self.endereco_completo() or 'Empty address'}"


@dataclass(frozen=True)
class ChangeDetails:
    """
    Detalhes de uma mudança de componente do endereço

    ``previous``/``current`` trazem apenas o componente comparado:
    logradouro {logradouro}; bairro {bairro, bairro_completo};
    municipio {municipio, uf}.
    """

    field: str  # logradouro, bairro ou municipio
    previous: dict[str, Any]
    current: dict[str, Any]
    has_changed: bool
    timestamp: float = dataclasses.field(default_factory=time.time)
    previous_address: Optional[BrazilianStandardAddress] = None
    current_address: Optional[BrazilianStandardAddress] = None
