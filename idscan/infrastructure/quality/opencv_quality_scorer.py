"""
Adapter: OpenCV Quality Scorer.

Pontua frames com 2 métricas de CV clássico, amostradas em grade
para rodar a cada tick do auto-capture:
  1. Brilho → luma média (0.299R + 0.587G + 0.114B) a cada N pixels
  2. Blur   → variância do Laplaciano nos pixels internos amostrados
"""

import cv2
import numpy as np

from idscan.core.interfaces.quality_scorer import IQualityScorer, QualityScore

LUMA_WEIGHTS_BGR = np.array([0.114, 0.587, 0.299])


def decode_image(image_bytes: bytes) -> np.ndarray:
    """Decodifica JPEG/PNG em array BGR. ValueError se inválido."""
    img_array = np.frombuffer(image_bytes, dtype=np.uint8)
    img = cv2.imdecode(img_array, cv2.IMREAD_COLOR) if img_array.size else None
    if img is None:
        raise ValueError("Não foi possível decodificar a imagem")
    return img


class OpenCVQualityScorer(IQualityScorer):
    """
    Quality Scorer usando OpenCV + numpy — determinístico, sem I/O.
    """

    def __init__(self, brightness_stride: int = 10, blur_stride: int = 4):
        if brightness_stride <= 0 or blur_stride <= 0:
            raise ValueError("strides must be positive")
        self._brightness_stride = brightness_stride
        self._blur_stride = blur_stride

    def score(self, image) -> QualityScore:
        """Calcula brilho e nitidez do frame."""
        img = decode_image(image) if isinstance(image, (bytes, bytearray)) else image
        if img is None or img.size == 0:
            raise ValueError("Imagem vazia")

        return QualityScore(
            brightness=self._check_brightness(img),
            blur_score=self._check_blur(img),
        )

    # ─── Métodos internos ──────────────────────────────────

    def _check_brightness(self, img: np.ndarray) -> float:
        """
        Luma média sobre a grade amostrada (a cada N pixels nos dois eixos).
        """
        step = self._brightness_stride
        sampled = img[::step, ::step].astype(np.float64)
        if sampled.ndim == 2:
            # grayscale: o próprio valor já é a luma
            return float(sampled.mean())
        luma = sampled[..., :3] @ LUMA_WEIGHTS_BGR
        return float(luma.mean())

    def _check_blur(self, img: np.ndarray) -> float:
        """
        Variância (populacional) do Laplaciano 4-vizinhos nos pixels internos
        amostrados — quanto maior, mais nítido. Típico: <100 = borrado.
        """
        gray = self._to_gray(img)
        h, w = gray.shape[:2]
        if h < 3 or w < 3:
            return 0.0

        # ksize=1 → kernel [[0,1,0],[1,-4,1],[0,1,0]]
        laplacian = cv2.Laplacian(gray, cv2.CV_64F, ksize=1)
        step = self._blur_stride
        responses = laplacian[1:h - 1:step, 1:w - 1:step]
        if responses.size == 0:
            return 0.0
        return float(responses.var())

    @staticmethod
    def _to_gray(img: np.ndarray) -> np.ndarray:
        if img.ndim == 2:
            return img.astype(np.float64)
        if img.shape[2] == 4:
            img = img[..., :3]
        # mesma ponderação da luma, sem arredondar para uint8
        return img.astype(np.float64) @ LUMA_WEIGHTS_BGR
