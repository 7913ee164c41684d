# --------------------------------------------------------------
# File: errors.py
# Description: Jerarquía de errores de la demo de tarjetas Rain.
# --------------------------------------------------------------
"""Excepciones que las capas `core` y `api` propagan hacia la interfaz."""

from typing import Optional


class RainError(Exception):
    """Base común para cualquier fallo del flujo de la demo."""


class InvalidInput(RainError, ValueError):
    """Parámetro ausente o mal formado detectado antes de cualquier llamada de red."""


class RemoteError(RainError):
    """Respuesta no satisfactoria (o fallo de transporte) de la API de Rain.

    Attributes:
        status_code (Optional[int]): Código HTTP, ``None`` si no hubo respuesta.
        status_text (str): Texto de estado o mensaje devuelto por el servicio.

    """

    def __init__(self, message: str, status_code: Optional[int] = None, status_text: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.status_text = status_text


class DecryptionFailed(RainError):
    """Error al decodificar la clave, inicializar el cifrador o decodificar UTF-8."""


class RetryExhausted(RainError):
    """Se agotaron los intentos sin que la condición esperada se cumpliera.

    Attributes:
        attempts (int): Número de intentos realizados.
        last_error (Optional[BaseException]): Último error reintentable, si lo hubo.

    """

    def __init__(self, message: str, attempts: int, last_error: Optional[BaseException] = None):
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error
