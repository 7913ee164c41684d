# --------------------------------------------------------------
# File: Home.py
# Description: Página principal de Streamlit: identidad de la wallet y estado del flujo.
# --------------------------------------------------------------

import logging

import streamlit as st

from api.services import DemoStep, determine_demo_step, resolve_wallet_email
from core import config
from core.errors import RainError
from rain_session import DEMO_STATE_KEY, get_client, set_demo_state

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


# Configura los metadatos de la página principal de la aplicación.
st.set_page_config(page_title="Rain Card Demo", page_icon="💳", layout="centered")

st.title("💳 Rain Card Demo")
st.write(
    "Alta de usuario, aprobación KYC, contrato de colateral en Base Sepolia "
    "y emisión de una tarjeta virtual con la API de Rain."
)

# La wallet la aporta el proveedor externo; aquí se introduce a mano.
wallet_ctx = st.session_state.get("wallet_ctx", {})
address = st.text_input("Dirección de la wallet", value=wallet_ctx.get("address", ""))
owner = st.text_input(
    "Propietario de la wallet",
    value=wallet_ctx.get("owner", ""),
    help="Formato `email:<dirección>`; si no se indica se usa el email de abajo.",
)
email = st.text_input("Email del usuario", value=wallet_ctx.get("email", ""))

wallet_email = resolve_wallet_email(owner, email)

if st.button("Comprobar estado", disabled=not address or not wallet_email):
    st.session_state["wallet_ctx"] = {"address": address, "owner": owner, "email": wallet_email}
    with st.spinner("Consultando Rain..."):
        try:
            state = determine_demo_step(get_client(), address)
        except RainError as exc:
            st.error(f"No se ha podido consultar Rain: {exc}")
            st.stop()
    set_demo_state(st.session_state, state)

state = st.session_state.get(DEMO_STATE_KEY)
if state is not None:
    steps = list(DemoStep)
    current = steps.index(state.step)
    st.markdown("### Progreso")
    for index, step in enumerate(steps):
        mark = "✅" if index < current else ("👉" if index == current else "⬜")
        st.write(f"{mark} {index + 1}. {step.value}")
    st.info("Continúa en la página correspondiente al paso actual.")
else:
    st.info("Introduce la wallet y pulsa **Comprobar estado** para empezar.")
