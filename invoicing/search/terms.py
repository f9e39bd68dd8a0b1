"""
Search term classification.

Splits a raw search string into candidate invoice numbers and free-text
fragments matched against bill-to name and email.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional

_INT32_MIN = -(2 ** 31)
_INT32_MAX = 2 ** 31 - 1
_NUMERIC_TOKEN = re.compile(r"^[+-]?[0-9]+$")


@dataclass(frozen=True)
class ClassifiedTerms:
    numbers: FrozenSet[int] = frozenset()
    text_tokens: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.numbers and not self.text_tokens


def _parse_number(token: str) -> Optional[int]:
    if not _NUMERIC_TOKEN.match(token):
        return None
    value = int(token)
    if value < _INT32_MIN or value > _INT32_MAX:
        return None
    return value


def classify(raw: Optional[str]) -> ClassifiedTerms:
    """Partition ``raw`` into numeric and textual tokens.

    Commas count as separators. A token is numeric when it is an optionally
    signed run of digits that fits a 32-bit signed integer; everything else is
    kept verbatim, in order, as a text token.
    """
    if not raw:
        return ClassifiedTerms()
    numbers = set()
    text_tokens: List[str] = []
    for token in raw.replace(",", " ").split():
        number = _parse_number(token)
        if number is None:
            text_tokens.append(token)
        else:
            numbers.add(number)
    return ClassifiedTerms(numbers=frozenset(numbers), text_tokens=text_tokens)
