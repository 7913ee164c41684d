# --------------------------------------------------------------
# File: crypto_sym.py
# Description: Descifrado AES-128-GCM de los secretos de tarjeta de Rain.
# --------------------------------------------------------------
"""Rutinas de descifrado simétrico para revelar PAN y CVC."""

import base64
import re
import string

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from core.errors import DecryptionFailed, InvalidInput

_HEX = re.compile(r"[0-9A-Fa-f]+")
_PADDING = string.whitespace + "\x00"
AES_128_KEY_BYTES = 16


def is_hex_string(value: str) -> bool:
    """Indica si ``value`` es hexadecimal no vacío y decodificable a bytes."""

    return bool(value) and len(value) % 2 == 0 and _HEX.fullmatch(value) is not None


def decrypt_secret(base64_secret: str, base64_iv: str, secret_key: str) -> str:
    """Descifra un campo de tarjeta con la clave de sesión negociada.

    Se aplica solo el flujo de clave de GCM (``update``) sin ``finalize``: no se
    verifica la integridad del texto cifrado. Si Rain adjunta la etiqueta de 16
    bytes, esta se descifra como basura al final del texto; los bytes que no son
    UTF-8 válido se sustituyen por U+FFFD y el llamante trunca a la longitud fija.

    Args:
        base64_secret (str): Texto cifrado en Base64.
        base64_iv (str): Vector de inicialización en Base64.
        secret_key (str): Clave AES-128 en hexadecimal.

    Returns:
        str: Texto en claro sin espacios ni relleno NUL en los extremos.

    Raises:
        InvalidInput: Si falta algún parámetro o la clave no es hexadecimal.
        DecryptionFailed: Si la clave, el IV o el texto cifrado no son válidos.

    """

    if not base64_secret:
        raise InvalidInput("base64_secret es obligatorio")
    if not base64_iv:
        raise InvalidInput("base64_iv es obligatorio")
    if not secret_key or not is_hex_string(secret_key):
        raise InvalidInput("secret_key debe ser una cadena hexadecimal")

    key = bytes.fromhex(secret_key)
    if len(key) != AES_128_KEY_BYTES:
        raise DecryptionFailed(
            f"La clave AES-128 debe tener {AES_128_KEY_BYTES} bytes, recibidos {len(key)}"
        )

    try:
        ciphertext = base64.b64decode(base64_secret)
        iv = base64.b64decode(base64_iv)
        decryptor = Cipher(algorithms.AES(key), modes.GCM(iv)).decryptor()
        plaintext = decryptor.update(ciphertext)
    except ValueError as exc:
        raise DecryptionFailed(f"No se ha podido descifrar el secreto: {exc}") from exc

    return plaintext.decode("utf-8", errors="replace").strip(_PADDING)
