"""
Contract: Quality Scorer

Mede brilho e nitidez de um frame capturado. Qualquer implementação
(OpenCV, numpy puro, serviço externo) deve respeitar este contrato:
função pura dos pixels, determinística, sem I/O e sem mutar a entrada.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

DEFAULT_MIN_BRIGHTNESS = 50.0
DEFAULT_MIN_BLUR = 100.0


@dataclass(frozen=True)
class QualityScore:
    """Métricas de qualidade de um frame."""
    brightness: float     # luma média (0-255)
    blur_score: float     # variância do Laplaciano — maior = mais nítido

    def is_acceptable(
        self,
        min_brightness: float = DEFAULT_MIN_BRIGHTNESS,
        min_blur: float = DEFAULT_MIN_BLUR,
    ) -> bool:
        """Frame aceitável: claro o suficiente E nítido o suficiente."""
        return self.brightness >= min_brightness and self.blur_score >= min_blur

    def rejection_reasons(
        self,
        min_brightness: float = DEFAULT_MIN_BRIGHTNESS,
        min_blur: float = DEFAULT_MIN_BLUR,
    ) -> list[str]:
        reasons = []
        if self.brightness < min_brightness:
            reasons.append("TOO_DARK")
        if self.blur_score < min_blur:
            reasons.append("BLUR_HIGH")
        return reasons

    def to_dict(self) -> dict:
        return {
            "brightness": round(self.brightness, 2),
            "blur_score": round(self.blur_score, 2),
        }


class IQualityScorer(ABC):
    """
    Port: Quality Scorer

    Responsável por pontuar um frame; a decisão de aceitar fica
    com quem chama (Capture Gate), parametrizada pelos limites.
    """

    @abstractmethod
    def score(self, image: Any) -> QualityScore:
        """
        Pontua a imagem.

        Args:
            image: Imagem BGR/grayscale (np.ndarray) ou bytes (JPEG/PNG).

        Returns:
            QualityScore com brilho e nitidez.

        Raises:
            ValueError: imagem vazia ou impossível de decodificar.
        """
        ...
