# --------------------------------------------------------------
# File: rain_session.py
# Description: Cliente compartido y estado de sesión de las páginas de Streamlit.
# --------------------------------------------------------------
"""Utilidades comunes a `Home.py` y a las páginas del flujo."""

from typing import Any, Dict, MutableMapping, Optional

import streamlit as st

from api.rain_client import RainClient
from api.services import DemoState
from core import config
from core.models import ContractToken, DecryptedCard, UserContract

DEMO_STATE_KEY = "demo_state"
REVEALED_KEY = "revealed_card"


@st.cache_resource
def get_client() -> RainClient:
    """Único cliente Rain por proceso, compartido por todas las páginas."""
    return RainClient.from_env()


def set_demo_state(session: MutableMapping[str, Any], state: DemoState) -> None:
    """Guarda el nuevo estado y descarta datos revelados de otra tarjeta."""

    session[DEMO_STATE_KEY] = state
    current_card = state.card.id if state.card else None
    revealed = session.get(REVEALED_KEY)
    if revealed is not None and revealed["card_id"] != current_card:
        del session[REVEALED_KEY]


def store_revealed(session: MutableMapping[str, Any], card_id: str, card: DecryptedCard) -> None:
    # SECURITY: PAN y CVC solo se guardan mientras se muestran y ligados a su tarjeta.
    session[REVEALED_KEY] = {"card_id": card_id, "card": card}


def revealed_for(session: MutableMapping[str, Any], card_id: str) -> Optional[DecryptedCard]:
    """Datos revelados de ``card_id``; los de cualquier otra tarjeta se borran."""

    revealed = session.get(REVEALED_KEY)
    if revealed is None:
        return None
    if revealed["card_id"] != card_id:
        del session[REVEALED_KEY]
        return None
    return revealed["card"]


def hide_revealed(session: MutableMapping[str, Any]) -> None:
    session.pop(REVEALED_KEY, None)


def collateral_tokens(contract: UserContract) -> Dict[str, ContractToken]:
    """Tokens de colateral que muestra la demo, por símbolo."""

    return {
        "RUSD": contract.find_token(config.RUSD_CONTRACT_ADDRESS),
        "USDC": contract.find_token(config.USDC_CONTRACT_ADDRESS),
    }
