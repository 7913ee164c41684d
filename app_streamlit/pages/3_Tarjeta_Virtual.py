# --------------------------------------------------------------
# File: 3_Tarjeta_Virtual.py
# Description: Emisión de la tarjeta virtual y revelado de PAN y CVC.
# --------------------------------------------------------------

import streamlit as st

from api.services import DemoStep, get_decrypted_card_data, issue_demo_card
from core.errors import RainError
from rain_session import (
    DEMO_STATE_KEY,
    get_client,
    hide_revealed,
    revealed_for,
    set_demo_state,
    store_revealed,
)

st.title("💳 Tarjeta virtual")

state = st.session_state.get(DEMO_STATE_KEY)
if state is None or state.contract is None:
    st.warning("Crea primero el **Contrato** de colateral.")
    st.stop()

if state.card is None:
    if st.button("Emitir tarjeta virtual"):
        display_name = st.session_state.get("wallet_ctx", {}).get("email")
        try:
            card = issue_demo_card(get_client(), state.user.id, display_name)
        except RainError as exc:
            st.error(f"Emisión fallida: {exc}")
            st.stop()
        state = state.model_copy(update={"step": DemoStep.CARD_ISSUED, "card": card})
        set_demo_state(st.session_state, state)
        st.success("🎉 Tarjeta virtual emitida.")
    else:
        st.stop()

card = state.card
col1, col2 = st.columns(2)
with col1:
    st.write("**Titular:**", card.display_name)
    st.write("**Tipo:**", card.type)
    st.write("**Estado:**", card.status)
with col2:
    st.write("**Últimos 4:**", card.last_four)
    if card.limit is not None:
        st.write("**Límite:**", f"{card.limit.amount:.2f} ({card.limit.frequency})")

if st.button("🔓 Revelar datos de la tarjeta"):
    try:
        store_revealed(st.session_state, card.id, get_decrypted_card_data(card.id, get_client()))
    except RainError as exc:
        st.error(f"No se han podido revelar los datos: {exc}")

revealed = revealed_for(st.session_state, card.id)
if revealed is not None:
    st.code(f"{revealed.formatted_number()}\nCVC {revealed.cvc}")
    if st.button("Ocultar"):
        hide_revealed(st.session_state)
        st.rerun()
