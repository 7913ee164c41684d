# --------------------------------------------------------------
# File: retry.py
# Description: Reintentos acotados con espera exponencial.
# --------------------------------------------------------------
"""Utilidad genérica para repetir una operación hasta que su resultado sirva."""

import logging
import time
from typing import Callable, Optional, Tuple, Type, TypeVar

from core.errors import InvalidInput, RetryExhausted

logger = logging.getLogger(__name__)

T = TypeVar("T")


def backoff_delay(attempt: int, base_delay: float = 1.0) -> float:
    """Espera previa al siguiente intento: 1 s, 2 s, 4 s... para ``base_delay=1``."""

    return base_delay * (2**attempt)


def retry_until(
    operation: Callable[[], T],
    predicate: Callable[[T], bool],
    *,
    max_attempts: int = 10,
    base_delay: float = 1.0,
    retry_on: Tuple[Type[BaseException], ...] = (),
    sleep: Callable[[float], None] = time.sleep,
    description: str = "operación",
) -> T:
    """Ejecuta ``operation`` hasta que ``predicate`` acepte su resultado.

    Un resultado rechazado y las excepciones de ``retry_on`` se reintentan;
    cualquier otra excepción se propaga de inmediato.

    Args:
        operation (Callable[[], T]): Llamada a repetir.
        predicate (Callable[[T], bool]): Condición que debe cumplir el resultado.
        max_attempts (int): Número máximo de intentos.
        base_delay (float): Espera en segundos tras el primer intento fallido.
        retry_on (Tuple[Type[BaseException], ...]): Excepciones reintentables.
        sleep (Callable[[float], None]): Función de espera (inyectable en pruebas).
        description (str): Nombre de la operación para los logs.

    Returns:
        T: Primer resultado que satisface ``predicate``.

    Raises:
        InvalidInput: Si ``max_attempts`` es menor que 1.
        RetryExhausted: Si ningún intento produce un resultado válido.

    """

    if max_attempts < 1:
        raise InvalidInput("max_attempts debe ser al menos 1")

    last_error: Optional[BaseException] = None
    for attempt in range(max_attempts):
        logger.debug("%s: intento %d/%d", description, attempt + 1, max_attempts)
        try:
            result = operation()
        except retry_on as exc:
            last_error = exc
            logger.warning("%s: intento %d fallido: %s", description, attempt + 1, exc)
        else:
            if predicate(result):
                return result
            logger.info("%s: resultado aún no disponible", description)

        if attempt < max_attempts - 1:
            delay = backoff_delay(attempt, base_delay)
            logger.info("%s: reintentando en %.1f s", description, delay)
            sleep(delay)

    raise RetryExhausted(
        f"{description}: sin resultado tras {max_attempts} intentos",
        attempts=max_attempts,
        last_error=last_error,
    ) from last_error
