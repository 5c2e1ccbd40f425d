# tfg_backend/services/refs.py
"""
Referencias a entidades de referencia (curso, titulación, tutor).

Un TFG puede recibir la referencia como ID o como etiqueta escrita por una
persona ("23/24", "Jane Doe"). Se interpreta una sola vez en el borde del
servicio y hacia dentro solo circula el ID canónico.
"""
from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class RefById:
    id: int


@dataclass(frozen=True)
class RefByLabel:
    label: str


Ref = Union[RefById, RefByLabel]


def parse_ref(value: Any) -> Ref:
    """Convierte un valor de entrada en ``RefById`` o ``RefByLabel``."""
    if isinstance(value, (RefById, RefByLabel)):
        return value
    if isinstance(value, bool):
        raise ValueError("Referencia inválida")
    if isinstance(value, int):
        return RefById(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("Referencia vacía")
        if text.isdigit():
            return RefById(int(text))
        return RefByLabel(text)
    raise ValueError("Referencia inválida")
