"""
Hospital names: display form and ordering
=========================================

Trend tables list some hospitals in a fixed order (the big training/research
hospitals first) and the rest alphabetically. Alphabetical here means the
Turkish alphabet: "Ç" after "C", "İ" after "I", and so on. Plain `sorted()` on
Python strings puts those letters after "Z".

Everything locale specific sits behind `EntityOrdering`, so the pivot code only
ever calls `ordering.sort_key(entity_id)` and `ordering.label(entity_id)`.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, Dict, Sequence, Tuple
import re

TURKISH_ALPHABET = "abcçdefgğhıijklmnoöprsştuüvyz"
_ALPHA_POS: Dict[str, int] = {ch: i for i, ch in enumerate(TURKISH_ALPHABET)}

# longest first so "EĞİTİM VE ARAŞTIRMA HASTANESİ" wins over "HASTANESİ"
_SHORT_FORMS: Tuple[Tuple[str, str], ...] = (
    ("eğitim ve araştırma hastanesi", "EAH"),
    ("kadın doğum ve çocuk hastalıkları hastanesi", "KDÇ"),
    ("devlet hastanesi", "DH"),
    ("ilçe hastanesi", "İH"),
    ("hastanesi", "H"),
)


def turkish_lower(text: str) -> str:
    """Lowercase with Turkish dotted/dotless I rules."""
    return text.replace("I", "ı").replace("İ", "i").lower()


def normalize_name(name: str) -> str:
    """Trim and collapse runs of whitespace (as the upload parser does)."""
    return re.sub(r"\s+", " ", str(name or "").strip())


def turkish_sort_key(text: str) -> Tuple:
    """Collation key following the Turkish alphabet; other characters sort after letters."""
    key = []
    for ch in turkish_lower(normalize_name(text)):
        pos = _ALPHA_POS.get(ch)
        if pos is not None:
            key.append((1, pos, ""))
        elif ch.isdigit() or ch == " ":
            # spaces and digits before letters, like most collations
            key.append((0, ord(ch), ""))
        else:
            key.append((2, 0, ch))
    return tuple(key)


def shorten_name(name: str, prefix: str = "") -> str:
    """Short display form, e.g. "Şanlıurfa Mehmet Akif İnan Eğitim ve Araştırma Hastanesi" -> "Mehmet Akif İnan EAH"."""
    text = normalize_name(name)
    if prefix and turkish_lower(text).startswith(turkish_lower(prefix) + " "):
        text = text[len(prefix) + 1:]
    low = turkish_lower(text)
    for long_form, short in _SHORT_FORMS:
        if low.endswith(" " + long_form):
            return text[: len(text) - len(long_form)].rstrip() + " " + short
    return text


@dataclass
class EntityOrdering:
    """Priority list first (in its own order), then the rest by collation of the display name."""
    priority: Sequence[str] = ()
    normalize: Callable[[str], str] = normalize_name
    collate: Callable[[str], object] = turkish_sort_key
    labeler: Callable[[str], str] = normalize_name
    _rank: Dict[str, int] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._rank = {}
        for i, name in enumerate(self.priority):
            self._rank.setdefault(self.normalize(name), i)

    def label(self, entity_id: str) -> str:
        return self.labeler(entity_id)

    def is_priority(self, entity_id: str) -> bool:
        return self.normalize(entity_id) in self._rank

    def sort_key(self, entity_id: str) -> Tuple:
        rank = self._rank.get(self.normalize(entity_id))
        if rank is not None:
            return (0, rank, ())
        return (1, 0, self.collate(self.label(entity_id)))
