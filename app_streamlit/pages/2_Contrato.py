# --------------------------------------------------------------
# File: 2_Contrato.py
# Description: Creación del contrato de colateral y consulta de saldos.
# --------------------------------------------------------------

import streamlit as st

from api.services import DemoState, DemoStep, create_demo_contract, refresh_contract
from core.errors import RainError
from rain_session import DEMO_STATE_KEY, collateral_tokens, get_client, set_demo_state

st.title("🏗️ Contrato de colateral")

state = st.session_state.get(DEMO_STATE_KEY)
if state is None or state.user is None:
    st.warning("Completa primero el **Alta y KYC**.")
    st.stop()

if state.contract is None:
    st.write("🎉 KYC aprobado. Falta desplegar el contrato en Base Sepolia.")
    if st.button("Crear contrato"):
        with st.spinner("Creando contrato..."):
            try:
                contract = create_demo_contract(get_client(), state.user.id)
            except RainError as exc:
                st.error(f"Creación de contrato fallida: {exc}")
                st.stop()
        state = DemoState(step=DemoStep.CONTRACT_CREATED, user=state.user, contract=contract)
        set_demo_state(st.session_state, state)
        st.success("✅ Contrato creado. Ya puedes emitir la tarjeta.")
    else:
        st.stop()

contract = state.contract
st.write("**Cadena:**", f"Base Sepolia ({contract.chain_id})")
st.write("**Dirección de depósito:**", f"`{contract.deposit_address}`")
st.write("**Proxy:**", f"`{contract.proxy_address}`")

# Un bloque por token de colateral: saldo, tipo de cambio y tasa de anticipo.
for column, (symbol, token) in zip(st.columns(2), collateral_tokens(contract).items()):
    with column:
        st.markdown(f"#### {symbol}")
        st.caption(f"`{token.address}`")
        st.write(f"**Saldo {symbol}:**", token.balance)
        st.write("**Tipo de cambio:**", token.exchange_rate)
        st.write("**Tasa de anticipo:**", f"{token.advance_rate}%")

if st.button("🔄 Actualizar saldo"):
    try:
        updated = refresh_contract(get_client(), state.user.id, contract)
    except RainError as exc:
        st.error(f"No se ha podido actualizar el saldo: {exc}")
    else:
        set_demo_state(st.session_state, state.model_copy(update={"contract": updated}))
        st.rerun()
