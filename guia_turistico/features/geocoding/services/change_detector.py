"""Histórico de endereços e detecção de mudanças por componente"""
from typing import Any, Optional

from ..domain.models import BrazilianStandardAddress


class AddressDataStore:
    """Endereço atual e anterior, com as respostas brutas correspondentes"""

    def __init__(self) -> None:
        self.current_address: Optional[BrazilianStandardAddress] = None
        self.previous_address: Optional[BrazilianStandardAddress] = None
        self.current_raw: Optional[dict[str, Any]] = None
        self.previous_raw: Optional[dict[str, Any]] = None

    def update(self, address: BrazilianStandardAddress, raw: Optional[dict[str, Any]]) -> None:
        self.previous_address = self.current_address
        self.previous_raw = self.current_raw
        self.current_address = address
        self.current_raw = raw

    def has_history(self) -> bool:
        return self.current_address is not None and self.previous_address is not None

    def clear(self) -> None:
        self.current_address = None
        self.previous_address = None
        self.current_raw = None
        self.previous_raw = None


class AddressChangeDetector:
    """
    Detecta mudanças de um campo entre dois endereços

    Guarda a assinatura ``anterior=>atual`` da última mudança informada
    por campo, de modo que a mesma transição não seja informada duas
    vezes seguidas.
    """

    def __init__(self) -> None:
        self._signatures: dict[str, str] = {}

    def has_field_changed(
        self,
        field: str,
        current: Optional[BrazilianStandardAddress],
        previous: Optional[BrazilianStandardAddress],
    ) -> bool:
        if current is None or previous is None:
            return False

        current_value = getattr(current, field)
        previous_value = getattr(previous, field)
        if current_value == previous_value:
            return False

        signature = f"{previous_value}=>{current_value}"
        if self._signatures.get(field) == signature:
            return False

        self._signatures[field] = signature
        return True

    def get_signature(self, field: str) -> Optional[str]:
        return self._signatures.get(field)

    def clear_signature(self, field: str) -> bool:
        return self._signatures.pop(field, None) is not None

    def clear_all_signatures(self) -> None:
        self._signatures.clear()

    @property
    def tracked_fields(self) -> list[str]:
        return list(self._signatures)
