"""
Entity: Recognized Text

Resultado imutável de uma chamada de OCR: texto completo, linhas em ordem
de leitura e blocos com geometria. As visões derivadas (datas, números,
linhas em maiúsculas) são recalculadas a cada chamada — nada é cacheado.
"""

import re
from dataclasses import dataclass, field

MONTH_NAMES = (
    r"Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|Jun(?:e)?|Jul(?:y)?"
    r"|Aug(?:ust)?|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?"
)

# Three date families: D-M-Y, Y-M-D, "D Month Y"
DATE_PATTERNS = (
    re.compile(r"(?<!\d)\d{1,2}[/\-]\d{1,2}[/\-]\d{4}(?!\d)"),
    re.compile(r"(?<!\d)\d{4}[/\-]\d{1,2}[/\-]\d{1,2}(?!\d)"),
    re.compile(rf"(?<!\d)\d{{1,2}}\s+(?:{MONTH_NAMES})\.?\s+\d{{4}}(?!\d)", re.IGNORECASE),
)

NUMBER_PATTERN = re.compile(r"\b\d{6,}\b")


@dataclass(frozen=True)
class TextBlock:
    """Bloco de texto reportado pelo OCR."""
    text: str
    bounding_box: tuple[int, int, int, int] | None = None   # (x1, y1, x2, y2)
    confidence: float | None = None


@dataclass(frozen=True)
class DateMatch:
    """Substring com cara de data e sua posição no texto completo."""
    text: str
    offset: int


@dataclass(frozen=True)
class RecognizedText:
    """Saída normalizada de uma chamada de OCR."""
    full_text: str
    lines: tuple[str, ...] = ()
    blocks: tuple[TextBlock, ...] = field(default_factory=tuple)

    @classmethod
    def from_text(cls, text: str, blocks: list[TextBlock] | tuple[TextBlock, ...] = ()) -> "RecognizedText":
        """Constrói a partir do texto bruto; linhas = split em quebras de linha."""
        return cls(full_text=text, lines=tuple(text.split("\n")), blocks=tuple(blocks))

    @property
    def is_empty(self) -> bool:
        return not self.full_text.strip()

    def find_dates(self) -> list[DateMatch]:
        """Todas as substrings com formato de data, ordenadas por offset."""
        matches: dict[int, DateMatch] = {}
        for pattern in DATE_PATTERNS:
            for m in pattern.finditer(self.full_text):
                matches.setdefault(m.start(), DateMatch(text=m.group(0), offset=m.start()))
        return [matches[offset] for offset in sorted(matches)]

    def find_numbers(self) -> list[str]:
        """Sequências numéricas com 6 ou mais dígitos."""
        return NUMBER_PATTERN.findall(self.full_text)

    def all_caps_lines(self) -> list[str]:
        """Linhas não vazias inteiramente em maiúsculas."""
        result = []
        for line in self.lines:
            stripped = line.strip()
            if len(stripped) > 2 and stripped == stripped.upper():
                result.append(stripped)
        return result
