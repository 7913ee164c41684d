# --------------------------------------------------------------
# File: crypto_rsa.py
# Description: Negociación de la clave de sesión con RSA-OAEP (SHA-1).
# --------------------------------------------------------------
"""Generación del identificador de sesión que Rain exige para leer secretos."""

import base64
import secrets
from typing import Optional

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from core.crypto_sym import AES_128_KEY_BYTES, is_hex_string
from core.errors import InvalidInput
from core.models import SessionKey


def load_rsa_public_key(pem: str) -> rsa.RSAPublicKey:
    """Carga una clave pública RSA en formato PEM.

    Raises:
        InvalidInput: Si el PEM falta, no es válido o no es una clave RSA.

    """

    if not pem:
        raise InvalidInput("pem es obligatorio")
    try:
        public_key = serialization.load_pem_public_key(pem.encode("utf-8"))
    except ValueError as exc:
        raise InvalidInput(f"Clave pública PEM no válida: {exc}") from exc
    if not isinstance(public_key, rsa.RSAPublicKey):
        raise InvalidInput("La clave pública debe ser RSA")
    return public_key


def generate_session_id(pem: str, secret: Optional[str] = None) -> SessionKey:
    """Cifra un secreto simétrico con la clave pública de Rain.

    El texto que se cifra es la representación Base64 (como texto UTF-8) de
    los bytes del secreto; es el formato que espera el servidor.

    Args:
        pem (str): Clave pública RSA del servicio en formato PEM.
        secret (Optional[str]): Secreto hexadecimal; si se omite se generan
            16 bytes aleatorios.

    Returns:
        SessionKey: Secreto hexadecimal y su identificador de sesión en Base64.

    Raises:
        InvalidInput: Si falta la clave, el secreto no es hexadecimal o no
            cabe en un bloque RSA-OAEP.

    """

    public_key = load_rsa_public_key(pem)
    if secret is not None and not is_hex_string(secret):
        raise InvalidInput("secret debe ser una cadena hexadecimal")

    secret_key = secret if secret is not None else secrets.token_hex(AES_128_KEY_BYTES)
    plaintext = base64.b64encode(bytes.fromhex(secret_key)).decode("ascii").encode("utf-8")

    try:
        ciphertext = public_key.encrypt(
            plaintext,
            padding.OAEP(
                mgf=padding.MGF1(algorithm=hashes.SHA1()),
                algorithm=hashes.SHA1(),
                label=None,
            ),
        )
    except ValueError as exc:
        raise InvalidInput(f"secret demasiado largo para la clave RSA: {exc}") from exc

    return SessionKey(
        secret_key=secret_key,
        session_id=base64.b64encode(ciphertext).decode("ascii"),
    )
