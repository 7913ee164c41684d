# --------------------------------------------------------------
# File: test_retry.py
# Description: Pruebas de los reintentos con espera exponencial.
# --------------------------------------------------------------

import pytest

from core.errors import InvalidInput, RemoteError, RetryExhausted
from core.retry import backoff_delay, retry_until


def _sequence(*results):
    """Operación que devuelve (o lanza) cada elemento de ``results`` en orden."""
    pending = list(results)

    def _operation():
        item = pending.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    return _operation


def test_returns_first_result_without_waiting(no_sleep):
    result = retry_until(_sequence([1]), bool, sleep=no_sleep.append)
    assert result == [1]
    assert no_sleep == []


def test_retries_until_predicate_holds(no_sleep):
    """Un resultado que no cumple la condición se reintenta con espera.

    Args:
        no_sleep (List[float]): Registro de esperas.

    Returns:
        None: Se comprueban el resultado final y las esperas 1 s y 2 s.
    """
    result = retry_until(_sequence([], [], ["ok"]), bool, sleep=no_sleep.append)
    assert result == ["ok"]
    assert no_sleep == [1.0, 2.0]


def test_exhaustion_uses_exponential_backoff(no_sleep):
    with pytest.raises(RetryExhausted) as excinfo:
        retry_until(lambda: None, lambda value: value is not None, max_attempts=4, sleep=no_sleep.append)
    assert no_sleep == [1.0, 2.0, 4.0]
    assert excinfo.value.attempts == 4
    assert excinfo.value.last_error is None


def test_default_schedule_has_ten_attempts(no_sleep):
    calls = []

    def _operation():
        calls.append(1)
        return False

    with pytest.raises(RetryExhausted):
        retry_until(_operation, bool, sleep=no_sleep.append)
    assert len(calls) == 10
    assert no_sleep == [2.0**n for n in range(9)]


def test_retryable_errors_are_retried(no_sleep):
    operation = _sequence(RemoteError("boom"), RemoteError("boom"), "value")
    result = retry_until(operation, bool, retry_on=(RemoteError,), sleep=no_sleep.append)
    assert result == "value"
    assert no_sleep == [1.0, 2.0]


def test_last_retryable_error_is_chained(no_sleep):
    """Al agotar intentos se conserva el último error reintentable.

    Returns:
        None: Se valida ``last_error`` y la causa encadenada.
    """
    error = RemoteError("still failing", status_code=503, status_text="Service Unavailable")
    with pytest.raises(RetryExhausted) as excinfo:
        retry_until(
            _sequence(RemoteError("first"), error),
            bool,
            max_attempts=2,
            retry_on=(RemoteError,),
            sleep=no_sleep.append,
        )
    assert excinfo.value.last_error is error
    assert excinfo.value.__cause__ is error


def test_other_errors_propagate_immediately(no_sleep):
    with pytest.raises(KeyError):
        retry_until(_sequence(KeyError("hard")), bool, retry_on=(RemoteError,), sleep=no_sleep.append)
    assert no_sleep == []


def test_custom_base_delay(no_sleep):
    with pytest.raises(RetryExhausted):
        retry_until(lambda: 0, bool, max_attempts=3, base_delay=0.5, sleep=no_sleep.append)
    assert no_sleep == [0.5, 1.0]


def test_invalid_max_attempts():
    with pytest.raises(InvalidInput):
        retry_until(lambda: 1, bool, max_attempts=0)


def test_backoff_delay_doubles():
    assert [backoff_delay(n) for n in range(4)] == [1.0, 2.0, 4.0, 8.0]
