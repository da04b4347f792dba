"""
Contract: Camera

Fonte de frames para o Capture Gate. O núcleo só depende dos pixels
e de um gatilho de captura; hardware, preview e permissões ficam
na implementação.
"""

from abc import ABC, abstractmethod

import numpy as np


class ICamera(ABC):
    """
    Port: Camera

    Implementação pode ser OpenCV (webcam/USB), câmera de celular
    via bridge, ou um fake em testes.
    """

    @abstractmethod
    def initialize(self) -> None:
        """
        Adquire o dispositivo.

        Raises:
            PermissionDeniedError: acesso negado.
            DeviceError: dispositivo indisponível.
        """
        ...

    @abstractmethod
    def acquire_frame(self) -> np.ndarray:
        """
        Captura um frame.

        Returns:
            Frame BGR.

        Raises:
            DeviceError: câmera não inicializada, permissão revogada ou falha de captura.
        """
        ...

    @abstractmethod
    def set_flash(self, enabled: bool) -> None:
        """Liga/desliga o flash (no-op se não suportado)."""
        ...

    @property
    @abstractmethod
    def is_initialized(self) -> bool:
        ...

    @abstractmethod
    def release(self) -> None:
        """Libera o dispositivo."""
        ...
