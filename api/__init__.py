# --------------------------------------------------------------
# File: __init__.py
# Description: Capa de integración con la API de Rain.
# --------------------------------------------------------------
"""Inicializa el paquete `api`: cliente HTTP y servicios del flujo de la demo."""

__all__ = [
    "rain_client",
    "services",
]
