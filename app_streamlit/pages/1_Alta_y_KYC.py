# --------------------------------------------------------------
# File: 1_Alta_y_KYC.py
# Description: Alta del usuario en Rain con datos KYC de prueba.
# --------------------------------------------------------------

import streamlit as st

from api.services import DemoStep, build_demo_application, sign_up_demo_user
from core.errors import RainError
from rain_session import DEMO_STATE_KEY, get_client, set_demo_state

st.title("📝 Alta y KYC")

wallet_ctx = st.session_state.get("wallet_ctx")
if not wallet_ctx:
    st.warning("Indica primero la wallet en la página **Home**.")
    st.stop()

state = st.session_state.get(DEMO_STATE_KEY)
if state is not None and state.step != DemoStep.SIGNUP:
    st.success(f"Usuario ya registrado ({state.user.id if state.user else '-'}).")
    if state.user and state.user.kyc_redirect_url:
        st.markdown(f"[Verificación KYC externa]({state.user.kyc_redirect_url})")
    st.stop()

st.caption("Todos los datos KYC están fijados para la demo.")
application = build_demo_application(wallet_ctx["address"], wallet_ctx["email"])
st.json(application.to_payload())
st.info('El apellido "approved" hace que el sandbox de Rain apruebe el KYC sin revisión.')

if st.button("Enviar solicitud a Rain"):
    with st.spinner("Creando usuario y contrato..."):
        try:
            state = sign_up_demo_user(get_client(), wallet_ctx["address"], wallet_ctx["email"])
        except RainError as exc:
            st.error(f"Alta fallida: {exc}")
            st.stop()
    set_demo_state(st.session_state, state)
    st.success("✅ Usuario y contrato creados.")
    st.code(f"userId={state.user.id}\ndepositAddress={state.contract.deposit_address}")
