# --------------------------------------------------------------
# File: conftest.py
# Description: Fixtures compartidas: claves RSA de prueba y servidor Rain simulado.
# --------------------------------------------------------------

import base64
from typing import Callable, Iterator, List

import httpx
import pytest
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from api.rain_client import RainClient

BASE_URL = "https://rain.test/v1"


@pytest.fixture(scope="session")
def rsa_private_key() -> rsa.RSAPrivateKey:
    """Genera una clave RSA de 1024 bits que hace el papel de la de Rain.

    Returns:
        rsa.RSAPrivateKey: Clave privada compartida por toda la sesión de pruebas.
    """
    return rsa.generate_private_key(public_exponent=65537, key_size=1024)


@pytest.fixture(scope="session")
def public_key_pem(rsa_private_key) -> str:
    """PEM de la clave pública asociada a ``rsa_private_key``."""
    return (
        rsa_private_key.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode("ascii")
    )


@pytest.fixture(scope="session")
def unwrap_session_id(rsa_private_key) -> Callable[[str], bytes]:
    """Devuelve la función que usa el servidor para recuperar la clave AES.

    Returns:
        Callable[[str], bytes]: Convierte un ``SessionId`` en los bytes de la clave.
    """

    def _unwrap(session_id: str) -> bytes:
        secret_b64 = rsa_private_key.decrypt(
            base64.b64decode(session_id),
            padding.OAEP(
                mgf=padding.MGF1(algorithm=hashes.SHA1()),
                algorithm=hashes.SHA1(),
                label=None,
            ),
        )
        return base64.b64decode(secret_b64.decode("utf-8"))

    return _unwrap


@pytest.fixture(scope="session")
def encrypt_field() -> Callable[..., dict]:
    """Cifra un campo como lo entrega Rain: AES-GCM, por defecto sin la etiqueta final.

    Returns:
        Callable[..., dict]: Recibe clave, texto, IV y ``keep_tag`` y devuelve
        ``{"data", "iv"}`` en Base64.
    """

    def _encrypt(key: bytes, plaintext: bytes, iv: bytes, keep_tag: bool = False) -> dict:
        ciphertext = AESGCM(key).encrypt(iv, plaintext, None)
        if not keep_tag:
            ciphertext = ciphertext[:-16]
        return {
            "data": base64.b64encode(ciphertext).decode("ascii"),
            "iv": base64.b64encode(iv).decode("ascii"),
        }

    return _encrypt


@pytest.fixture
def make_client() -> Iterator[Callable[[Callable[[httpx.Request], httpx.Response]], RainClient]]:
    """Crea clientes Rain cuyo transporte es un manejador en memoria.

    Returns:
        Iterator[Callable]: Fábrica de ``RainClient``; se cierran al terminar.
    """
    clients: List[RainClient] = []

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> RainClient:
        client = RainClient("test-key", BASE_URL, transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close()


@pytest.fixture
def no_sleep() -> List[float]:
    """Lista donde se registran las esperas en lugar de dormir."""
    return []
