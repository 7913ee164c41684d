# --------------------------------------------------------------
# File: config.py
# Description: Configuración de la demo leída desde el entorno (.env).
# --------------------------------------------------------------
"""Valores por defecto para conectar con la API de emisión de tarjetas de Rain."""

import os

from dotenv import load_dotenv

load_dotenv()

RAIN_API_KEY = os.getenv("RAIN_API_KEY", "")
RAIN_API_URL = os.getenv("RAIN_API_URL", "https://api-dev.raincards.xyz/v1")

# Clave pública del entorno sandbox de Rain; la privada la custodia Rain.
_SANDBOX_PUBLIC_KEY = """-----BEGIN PUBLIC KEY-----
MIGfMA0GCSqGSIb3DQEBAQUAA4GNADCBiQKBgQCAP192809jZyaw62g/eTzJ3P9H
+RmT88sXUYjQ0K8Bx+rJ83f22+9isKx+lo5UuV8tvOlKwvdDS/pVbzpG7D7NO45c
0zkLOXwDHZkou8fuj8xhDO5Tq3GzcrabNLRLVz3dkx0znfzGOhnY4lkOMIdKxlQb
LuVM/dGDC9UpulF+UwIDAQAB
-----END PUBLIC KEY-----"""
RAIN_PUBLIC_KEY_PEM = os.getenv("RAIN_PUBLIC_KEY_PEM", _SANDBOX_PUBLIC_KEY)

# Base Sepolia
RAIN_CHAIN_ID = int(os.getenv("RAIN_CHAIN_ID", "84532"))
RUSD_CONTRACT_ADDRESS = os.getenv(
    "RUSD_CONTRACT_ADDRESS", "0x10b5Be494C2962A7B318aFB63f0Ee30b959D000b"
)
USDC_CONTRACT_ADDRESS = os.getenv(
    "USDC_CONTRACT_ADDRESS", "0x036CbD53842c5426634e7929541eC2318f3dCF7e"
)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
