# --------------------------------------------------------------
# File: models.py
# Description: Modelos de datos intercambiados con la API de Rain.
# --------------------------------------------------------------
"""Modelos Pydantic para las peticiones, respuestas y secretos de tarjeta."""

from typing import Dict, List, Literal, Optional, Union
from urllib.parse import urlencode

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RainModel(BaseModel):
    """Base que traduce los nombres snake_case a los campos camelCase de Rain."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_payload(self) -> dict:
        """Serializa el modelo como cuerpo JSON omitiendo los campos vacíos."""

        return self.model_dump(by_alias=True, exclude_none=True)


class SessionKey(BaseModel):
    """Resultado de la negociación de la clave de sesión.

    Attributes:
        secret_key (str): Secreto simétrico en hexadecimal; solo vive en memoria.
        session_id (str): Secreto cifrado con RSA-OAEP y codificado en Base64.

    """

    secret_key: str = Field(repr=False)
    session_id: str


class EncryptedField(RainModel):
    """Campo cifrado con AES-GCM tal y como lo entrega Rain.

    Attributes:
        data (str): Texto cifrado en Base64.
        iv (str): Vector de inicialización en Base64.

    """

    data: str
    iv: str


class EncryptedCardSecrets(RainModel):
    """Respuesta del endpoint de secretos: PAN y CVC cifrados."""

    encrypted_pan: EncryptedField
    encrypted_cvc: EncryptedField


class DecryptedCard(BaseModel):
    """Datos sensibles de la tarjeta ya descifrados.

    Attributes:
        card_number (str): PAN de 16 dígitos.
        cvc (str): Código de verificación de 3 dígitos.

    """

    card_number: str = Field(repr=False)
    cvc: str = Field(repr=False)

    def formatted_number(self) -> str:
        """Agrupa el PAN en bloques de cuatro dígitos."""

        blocks = [self.card_number[i : i + 4] for i in range(0, len(self.card_number), 4)]
        return " ".join(blocks)


class Address(RainModel):
    line1: str
    city: str
    region: str
    postal_code: str
    country_code: str


class ConsumerApplication(RainModel):
    """Solicitud de alta de un consumidor con sus datos KYC."""

    first_name: str
    last_name: str
    birth_date: str
    national_id: str
    country_of_issue: str
    email: str
    address: Address
    ip_address: str
    phone_country_code: str
    phone_number: str
    annual_salary: str
    account_purpose: str
    expected_monthly_volume: str
    is_terms_of_service_accepted: Literal[True] = True
    wallet_address: str


class VerificationLink(RainModel):
    url: str
    params: Dict[str, str] = Field(default_factory=dict)

    @property
    def redirect_url(self) -> str:
        """URL de verificación externa con ``userId`` y ``signature`` como query."""

        query = {key: self.params.get(key, "") for key in ("userId", "signature")}
        return f"{self.url}?{urlencode(query)}"


class RainUser(RainModel):
    """Usuario (o solicitud de usuario) registrado en Rain."""

    id: str
    application_status: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    wallet_address: Optional[str] = None
    is_active: Optional[bool] = None
    application_external_verification_link: Optional[VerificationLink] = None

    @property
    def kyc_redirect_url(self) -> str:
        link = self.application_external_verification_link
        return link.redirect_url if link else ""


class CardLimit(RainModel):
    frequency: str = "allTime"
    amount: float


class Shipping(RainModel):
    first_name: str
    last_name: str
    street: str
    city: str
    state: str
    zip_code: str
    country: str
    phone: str
    method: Optional[
        Literal["standard", "express", "international", "apc", "uspsinternational"]
    ] = None


class CardRequest(RainModel):
    """Parámetros de emisión de una tarjeta; ``shipping`` solo para físicas."""

    type: Literal["virtual", "physical"]
    limit: CardLimit
    display_name: Optional[str] = None
    status: Optional[Literal["notActivated", "active"]] = None
    shipping: Optional[Shipping] = None


class Card(RainModel):
    id: str
    status: Optional[str] = None
    type: Optional[str] = None
    limit: Optional[CardLimit] = None
    last_four: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("lastFour", "last4", "last_four")
    )
    display_name: Optional[str] = None


class ContractToken(RainModel):
    """Saldo de un token depositado como colateral en el contrato."""

    address: str
    balance: Union[str, float] = "0.0"
    exchange_rate: float = 1
    advance_rate: float = 100


class UserContract(RainModel):
    """Contrato de colateral desplegado por Rain para un usuario y una cadena."""

    id: str
    chain_id: int
    deposit_address: Optional[str] = None
    proxy_address: Optional[str] = None
    controller_address: Optional[str] = None
    tokens: List[ContractToken] = Field(default_factory=list)
    contract_version: Optional[Union[int, str]] = None

    def find_token(self, address: str) -> ContractToken:
        """Devuelve el token con esa dirección o uno con saldo cero si aún no existe."""

        for token in self.tokens:
            if token.address.lower() == address.lower():
                return token
        return ContractToken(address=address)
