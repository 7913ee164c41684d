# --------------------------------------------------------------
# File: services.py
# Description: Servicios del flujo de la demo y revelado de datos de tarjeta.
# --------------------------------------------------------------
"""Orquestación del alta, contrato, emisión y descifrado de tarjetas Rain."""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Callable, Optional

from pydantic import BaseModel

from api.rain_client import RainClient
from core import config
from core.crypto_rsa import generate_session_id
from core.crypto_sym import decrypt_secret
from core.errors import DecryptionFailed, InvalidInput, RainError, RemoteError
from core.models import (
    Address,
    Card,
    CardLimit,
    CardRequest,
    ConsumerApplication,
    DecryptedCard,
    RainUser,
    UserContract,
)

logger = logging.getLogger(__name__)

PAN_LENGTH = 16
CVC_LENGTH = 3
DEMO_CARD_LIMIT = 1000


class DemoStep(str, Enum):
    """Pasos del flujo en el orden en que se recorren."""

    SIGNUP = "signup"
    APPROVED = "approved"
    CONTRACT_CREATED = "contract-created"
    CARD_ISSUED = "card-issued"


class DemoState(BaseModel):
    """Paso actual del flujo junto con los recursos ya resueltos en Rain."""

    step: DemoStep
    user: Optional[RainUser] = None
    contract: Optional[UserContract] = None
    card: Optional[Card] = None


def get_decrypted_card_data(
    card_id: str, client: RainClient, public_key_pem: Optional[str] = None
) -> DecryptedCard:
    """Revela PAN y CVC de una tarjeta mediante el intercambio de clave de sesión.

    Cada llamada negocia una clave nueva, descarga los secretos cifrados y los
    descifra en memoria. Si falla cualquiera de los pasos no se devuelve nada.

    Args:
        card_id (str): Identificador de la tarjeta en Rain.
        client (RainClient): Cliente autenticado contra la API.
        public_key_pem (Optional[str]): Clave pública de Rain; por defecto la
            de ``core.config``.

    Returns:
        DecryptedCard: PAN (16 caracteres) y CVC (3 caracteres).

    Raises:
        InvalidInput: Si ``card_id`` está vacío.
        RemoteError: Si Rain responde con un estado no satisfactorio.
        DecryptionFailed: Si falla la negociación o el descifrado.

    """

    if not card_id:
        raise InvalidInput("card_id es obligatorio")

    logger.info("Obteniendo datos cifrados de la tarjeta %s", card_id)
    try:
        session = generate_session_id(public_key_pem or config.RAIN_PUBLIC_KEY_PEM)
        encrypted = client.get_card_secrets(card_id, session.session_id)
        card_number = decrypt_secret(
            encrypted.encrypted_pan.data, encrypted.encrypted_pan.iv, session.secret_key
        )
        cvc = decrypt_secret(
            encrypted.encrypted_cvc.data, encrypted.encrypted_cvc.iv, session.secret_key
        )
    except (RemoteError, DecryptionFailed) as exc:
        logger.error("No se han podido descifrar los datos de la tarjeta: %s", exc)
        raise
    except InvalidInput as exc:
        logger.error("No se han podido descifrar los datos de la tarjeta: %s", exc)
        raise DecryptionFailed(f"No se han podido obtener los datos de la tarjeta: {exc}") from exc

    logger.info("Datos de la tarjeta %s descifrados", card_id)
    return DecryptedCard(card_number=card_number[:PAN_LENGTH], cvc=cvc[:CVC_LENGTH])


def resolve_wallet_email(owner: Optional[str], fallback: Optional[str] = None) -> Optional[str]:
    """Extrae el email de un propietario ``email:<dirección>`` o usa ``fallback``."""

    if owner and owner.startswith("email:"):
        return owner[len("email:") :]
    return fallback


def build_demo_application(wallet_address: str, email: str) -> ConsumerApplication:
    """Solicitud con datos KYC fijos; el apellido ``approved`` aprueba en sandbox."""

    return ConsumerApplication(
        first_name=email,
        last_name="approved",
        birth_date="1990-01-01",
        national_id="123456789",
        country_of_issue="US",
        email=email,
        address=Address(
            line1="123 Test Street",
            city="San Francisco",
            region="CA",
            postal_code="94105",
            country_code="US",
        ),
        ip_address="127.0.0.1",
        phone_country_code="1",
        phone_number="5551234567",
        annual_salary="75000",
        account_purpose="personal",
        expected_monthly_volume="2000",
        is_terms_of_service_accepted=True,
        wallet_address=wallet_address,
    )


def create_demo_contract(
    client: RainClient,
    user_id: str,
    *,
    chain_id: int = config.RAIN_CHAIN_ID,
    max_attempts: int = 10,
    sleep: Callable[[float], None] = time.sleep,
) -> UserContract:
    """Solicita el contrato de colateral y espera a que Rain lo publique."""

    client.create_user_contract(user_id, chain_id)
    return client.get_chain_contract(user_id, chain_id, max_attempts=max_attempts, sleep=sleep)


def determine_demo_step(
    client: RainClient,
    wallet_address: str,
    *,
    chain_id: int = config.RAIN_CHAIN_ID,
    max_attempts: int = 10,
    sleep: Callable[[float], None] = time.sleep,
) -> DemoState:
    """Deduce en qué paso está una wallet consultando lo que ya existe en Rain.

    Cualquier fallo remoto al buscar el usuario devuelve el flujo al alta.
    """

    logger.info("Determinando el estado de la demo para %s", wallet_address)
    try:
        users = client.get_users_by_wallet_address(wallet_address)
    except RainError as exc:
        logger.error("Error buscando el usuario de la wallet: %s", exc)
        return DemoState(step=DemoStep.SIGNUP)

    if not users:
        logger.info("Sin usuario para la wallet: empieza el alta")
        return DemoState(step=DemoStep.SIGNUP)

    user = users[0]
    logger.info("Usuario existente: %s", user.id)

    try:
        contract = client.get_chain_contract(
            user.id, chain_id, max_attempts=max_attempts, sleep=sleep
        )
    except RainError as exc:
        logger.info("Usuario sin contrato (%s): se crea uno", exc)
        try:
            contract = create_demo_contract(
                client, user.id, chain_id=chain_id, max_attempts=max_attempts, sleep=sleep
            )
        except RainError as create_exc:
            logger.error("No se ha podido crear el contrato: %s", create_exc)
            return DemoState(step=DemoStep.SIGNUP, user=user)
        return DemoState(step=DemoStep.CONTRACT_CREATED, user=user, contract=contract)

    try:
        cards = client.list_user_cards(user.id)
    except RainError as exc:
        # Sin tarjetas consultables se ofrece emitir una.
        logger.warning("No se han podido consultar las tarjetas: %s", exc)
        cards = []

    if cards:
        return DemoState(step=DemoStep.CARD_ISSUED, user=user, contract=contract, card=cards[0])
    return DemoState(step=DemoStep.CONTRACT_CREATED, user=user, contract=contract)


def sign_up_demo_user(
    client: RainClient,
    wallet_address: str,
    email: str,
    *,
    settle_delay: float = 5.0,
    chain_id: int = config.RAIN_CHAIN_ID,
    max_attempts: int = 10,
    sleep: Callable[[float], None] = time.sleep,
) -> DemoState:
    """Da de alta al usuario de la demo y le crea el contrato de colateral.

    Args:
        client (RainClient): Cliente autenticado contra la API.
        wallet_address (str): Dirección de la wallet del usuario.
        email (str): Email asociado a la wallet.
        settle_delay (float): Espera entre el alta y la creación del contrato.
        chain_id (int): Cadena donde se despliega el contrato.
        max_attempts (int): Intentos de consulta del contrato.
        sleep (Callable[[float], None]): Función de espera.

    Returns:
        DemoState: Estado ``contract-created`` con usuario y contrato.

    """

    if not wallet_address or not email:
        raise InvalidInput("Wallet y email son obligatorios")

    user = client.create_user_application(build_demo_application(wallet_address, email))
    logger.info("Usuario %s creado; esperando %.0f s antes del contrato", user.id, settle_delay)
    sleep(settle_delay)

    contract = create_demo_contract(
        client, user.id, chain_id=chain_id, max_attempts=max_attempts, sleep=sleep
    )
    return DemoState(step=DemoStep.CONTRACT_CREATED, user=user, contract=contract)


def issue_demo_card(client: RainClient, user_id: str, display_name: Optional[str]) -> Card:
    """Emite una tarjeta virtual activa con un límite total de 1000."""

    request = CardRequest(
        type="virtual",
        limit=CardLimit(frequency="allTime", amount=DEMO_CARD_LIMIT),
        display_name=display_name,
        status="active",
    )
    return client.issue_card(user_id, request)


def refresh_contract(
    client: RainClient,
    user_id: str,
    previous: Optional[UserContract] = None,
    *,
    token_address: str = config.RUSD_CONTRACT_ADDRESS,
    chain_id: int = config.RAIN_CHAIN_ID,
) -> UserContract:
    """Vuelve a leer el contrato y registra si cambió el saldo del token."""

    updated = client.get_chain_contract(user_id, chain_id, max_attempts=1)
    new_balance = updated.find_token(token_address).balance
    if previous is not None:
        current_balance = previous.find_token(token_address).balance
        if str(current_balance) != str(new_balance):
            logger.info("Saldo actualizado: %s -> %s", current_balance, new_balance)
    logger.info("Saldo del token %s: %s", token_address, new_balance)
    return updated
