# --------------------------------------------------------------
# File: rain_client.py
# Description: Cliente HTTP para la API de emisión de tarjetas de Rain.
# --------------------------------------------------------------
"""Envoltorio síncrono sobre ``httpx`` para las llamadas que usa la demo."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional

import httpx
from pydantic import ValidationError

from core import config
from core.errors import InvalidInput, RemoteError
from core.models import (
    Card,
    CardRequest,
    ConsumerApplication,
    EncryptedCardSecrets,
    RainUser,
    UserContract,
)
from core.retry import retry_until

logger = logging.getLogger(__name__)


class RainClient:
    """Cliente de la API de Rain autenticado con ``Api-Key``.

    Args:
        api_key (str): Credencial enviada en cada petición.
        base_url (str): URL base de la API (incluye ``/v1``).
        transport (Optional[httpx.BaseTransport]): Transporte alternativo,
            útil para pruebas con ``httpx.MockTransport``.

    """

    def __init__(
        self,
        api_key: str,
        base_url: str = config.RAIN_API_URL,
        *,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        if not api_key:
            raise InvalidInput("RAIN_API_KEY no está configurada")
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self.base_url,
            headers={"Api-Key": api_key, "accept": "application/json"},
            transport=transport,
        )

    @classmethod
    def from_env(cls) -> "RainClient":
        """Construye el cliente con la configuración de ``core.config``."""

        return cls(config.RAIN_API_KEY, config.RAIN_API_URL)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "RainClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _request(
        self,
        method: str,
        path: str,
        action: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        try:
            return self._client.request(method, path, params=params, json=json, headers=headers)
        except httpx.TransportError as exc:
            raise RemoteError(f"{action}: {exc}") from exc

    @staticmethod
    def _raise_for_status(response: httpx.Response, action: str, *, use_body: bool = False) -> None:
        """Convierte una respuesta no satisfactoria en ``RemoteError``.

        Con ``use_body`` se prefiere el campo ``message`` del cuerpo JSON al
        texto de estado HTTP.
        """

        if response.is_success:
            return
        status_text = response.reason_phrase
        message = status_text
        if use_body:
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and body.get("message"):
                message = str(body["message"])
        raise RemoteError(f"{action}: {message}", status_code=response.status_code, status_text=status_text)

    @staticmethod
    def _parse(response: httpx.Response, action: str, parser: Callable[[Any], Any]) -> Any:
        try:
            return parser(response.json())
        except (TypeError, ValueError, ValidationError) as exc:
            raise RemoteError(
                f"{action}: respuesta no válida ({exc})",
                status_code=response.status_code,
                status_text=response.reason_phrase,
            ) from exc

    def create_user_application(self, application: ConsumerApplication) -> RainUser:
        """Envía la solicitud de alta (KYC) de un consumidor."""

        action = "Solicitud de usuario en Rain fallida"
        logger.info("Creando solicitud de consumidor en Rain")
        response = self._request(
            "POST", "/issuing/applications/user", action, json=application.to_payload()
        )
        self._raise_for_status(response, action, use_body=True)
        user = self._parse(response, action, RainUser.model_validate)
        logger.info("Solicitud creada: %s (%s)", user.id, user.application_status)
        return user

    def get_user_status(self, user_id: str) -> RainUser:
        action = "No se ha podido obtener el estado del usuario"
        response = self._request("GET", f"/issuing/applications/user/{user_id}", action)
        self._raise_for_status(response, action)
        user = self._parse(response, action, RainUser.model_validate)
        logger.info("Estado del usuario %s: %s", user.id, user.application_status)
        return user

    def get_users_by_wallet_address(self, wallet_address: str, limit: int = 100) -> List[RainUser]:
        """Busca entre los usuarios de Rain los asociados a una wallet."""

        action = "No se ha podido buscar el usuario por wallet"
        response = self._request("GET", "/issuing/users", action, params={"limit": limit})
        self._raise_for_status(response, action)
        users = self._parse(
            response, action, lambda data: [RainUser.model_validate(item) for item in data]
        )
        return [user for user in users if user.wallet_address == wallet_address]

    def issue_card(self, user_id: str, request: CardRequest) -> Card:
        action = "Emisión de tarjeta fallida"
        logger.info("Emitiendo tarjeta %s para %s", request.type, user_id)
        response = self._request(
            "POST", f"/issuing/users/{user_id}/cards", action, json=request.to_payload()
        )
        self._raise_for_status(response, action, use_body=True)
        card = self._parse(response, action, Card.model_validate)
        logger.info("Tarjeta emitida: %s", card.id)
        return card

    def list_user_cards(self, user_id: str, limit: int = 20) -> List[Card]:
        action = "No se han podido obtener las tarjetas"
        response = self._request(
            "GET", "/issuing/cards", action, params={"userId": user_id, "limit": limit}
        )
        self._raise_for_status(response, action)
        return self._parse(response, action, lambda data: [Card.model_validate(item) for item in data])

    def create_user_contract(self, user_id: str, chain_id: int = config.RAIN_CHAIN_ID) -> None:
        """Solicita el despliegue del contrato de colateral.

        El estado HTTP solo se registra: la consulta posterior de contratos es
        la que confirma si el contrato existe.
        """

        action = "Creación de contrato fallida"
        logger.info("Creando contrato en la cadena %s para %s", chain_id, user_id)
        response = self._request(
            "POST", f"/issuing/users/{user_id}/contracts", action, json={"chainId": chain_id}
        )
        if not response.is_success:
            logger.warning(
                "%s: %s %s", action, response.status_code, response.reason_phrase
            )

    def list_user_contracts(self, user_id: str) -> List[UserContract]:
        action = "No se han podido obtener los contratos"
        response = self._request("GET", f"/issuing/users/{user_id}/contracts", action)
        self._raise_for_status(response, action)
        return self._parse(
            response, action, lambda data: [UserContract.model_validate(item) for item in data]
        )

    def get_chain_contract(
        self,
        user_id: str,
        chain_id: int = config.RAIN_CHAIN_ID,
        *,
        max_attempts: int = 10,
        base_delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> UserContract:
        """Espera a que el contrato del usuario aparezca en ``chain_id``.

        Raises:
            RetryExhausted: Si tras ``max_attempts`` no hay contrato en la cadena.

        """

        def _has_chain(contracts: List[UserContract]) -> bool:
            return any(contract.chain_id == chain_id for contract in contracts)

        contracts = retry_until(
            lambda: self.list_user_contracts(user_id),
            _has_chain,
            max_attempts=max_attempts,
            base_delay=base_delay,
            retry_on=(RemoteError,),
            sleep=sleep,
            description=f"Contrato de {user_id} en la cadena {chain_id}",
        )
        contract = next(item for item in contracts if item.chain_id == chain_id)
        logger.info("Contrato encontrado: %s", contract.deposit_address)
        return contract

    def get_card_secrets(self, card_id: str, session_id: str) -> EncryptedCardSecrets:
        """Descarga PAN y CVC cifrados con la clave de la sesión indicada."""

        action = "No se han podido obtener los secretos de la tarjeta"
        response = self._request(
            "GET", f"/issuing/cards/{card_id}/secrets", action, headers={"SessionId": session_id}
        )
        self._raise_for_status(response, action)
        return self._parse(response, action, EncryptedCardSecrets.model_validate)
