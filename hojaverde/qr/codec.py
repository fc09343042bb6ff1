"""
Hoja Verde QR tokens.

Two textual formats link a physical product to its record:

- simple:   ``HV-{productId}-{timestamp}-{suffix}``
- detailed: ``HV-DATA-{base64(json)}`` carrying product and farm names

Timestamps are milliseconds since the epoch. Every ``parse_*`` helper
returns ``None`` for malformed input instead of raising, since codes come
straight from scanners and user input.
"""
import base64
import re
import secrets
import time
from datetime import datetime, timezone
from typing import NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field

from hojaverde.schemas.qr import QRInfo, QRDecodeResponse

PREFIX = "HV"
DETAILED_PREFIX = "HV-DATA-"
DISPLAY_CODE_LENGTH = 20

_DIGITS = re.compile(r"[0-9]+")


class QRReference(NamedTuple):
    product_id: int
    timestamp: int


class QRValidation(NamedTuple):
    is_valid: bool
    message: str


class QRCodeData(BaseModel):
    """Payload embedded in a detailed code (camelCase on the wire)."""

    model_config = ConfigDict(populate_by_name=True)

    product_id: int = Field(alias="productId")
    product_name: Optional[str] = Field(default=None, alias="productName")
    farm_name: Optional[str] = Field(default=None, alias="farmName")
    timestamp: int


def _now_ms() -> int:
    return int(time.time() * 1000)


def generate_qr_code(product_id: int) -> str:
    """Generates a unique QR code identifier for a product."""
    suffix = secrets.token_hex(4)
    return f"{PREFIX}-{product_id}-{_now_ms()}-{suffix}"


def parse_qr_code(qr_code: str) -> Optional[QRReference]:
    """Extracts product id and timestamp from a simple code."""
    if not isinstance(qr_code, str):
        return None

    parts = qr_code.split("-")
    if len(parts) < 4 or parts[0] != PREFIX:
        return None

    if not (_DIGITS.fullmatch(parts[1]) and _DIGITS.fullmatch(parts[2])):
        return None

    return QRReference(product_id=int(parts[1]), timestamp=int(parts[2]))


def create_qr_code_data(product_id: int, product_name: str, farm_name: str) -> QRCodeData:
    return QRCodeData(
        product_id=product_id,
        product_name=product_name,
        farm_name=farm_name,
        timestamp=_now_ms(),
    )


def generate_detailed_qr_code(product_id: int, product_name: str, farm_name: str) -> str:
    """Generates a code with embedded product metadata."""
    data = create_qr_code_data(product_id, product_name, farm_name)
    payload = data.model_dump_json(by_alias=True, exclude_none=True)
    encoded = base64.b64encode(payload.encode("utf-8")).decode("ascii")
    return f"{DETAILED_PREFIX}{encoded}"


def parse_detailed_qr_code(qr_code: str) -> Optional[QRCodeData]:
    if not isinstance(qr_code, str) or not qr_code.startswith(DETAILED_PREFIX):
        return None

    encoded = qr_code[len(DETAILED_PREFIX):]
    try:
        decoded = base64.b64decode(encoded, validate=True).decode("utf-8")
        data = QRCodeData.model_validate_json(decoded)
    except ValueError:
        # binascii, unicode, JSON and pydantic errors all derive from ValueError
        return None

    if not data.product_id or not data.timestamp:
        return None
    return data


def is_valid_qr_code(qr_code: str) -> bool:
    if not qr_code or not isinstance(qr_code, str):
        return False
    return parse_qr_code(qr_code) is not None or parse_detailed_qr_code(qr_code) is not None


def get_product_id_from_qr(qr_code: str) -> Optional[int]:
    """Product id from either format, simple format first."""
    simple = parse_qr_code(qr_code)
    if simple:
        return simple.product_id

    detailed = parse_detailed_qr_code(qr_code)
    if detailed:
        return detailed.product_id

    return None


def validate_qr_code_with_message(qr_code: str) -> QRValidation:
    if not qr_code or not qr_code.strip():
        return QRValidation(False, "Empty QR code")

    if not qr_code.startswith(PREFIX):
        return QRValidation(False, "Not a Hoja Verde QR code")

    if is_valid_qr_code(qr_code):
        return QRValidation(True, "Valid QR code")

    return QRValidation(False, "Invalid QR code format")


def _timestamp_to_datetime(timestamp: int) -> Optional[datetime]:
    try:
        return datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def display_code(qr_code: str) -> str:
    if len(qr_code) > DISPLAY_CODE_LENGTH:
        return f"{qr_code[:DISPLAY_CODE_LENGTH]}..."
    return qr_code


def format_qr_code_info(qr_code: str) -> QRInfo:
    detailed = parse_detailed_qr_code(qr_code)
    simple = parse_qr_code(qr_code)

    info = QRInfo(
        product_id=get_product_id_from_qr(qr_code),
        is_detailed=detailed is not None,
        display_code=display_code(qr_code),
    )
    if detailed:
        info.timestamp = _timestamp_to_datetime(detailed.timestamp)
        info.farm_name = detailed.farm_name
        info.product_name = detailed.product_name
    elif simple:
        info.timestamp = _timestamp_to_datetime(simple.timestamp)
    return info


def extract_qr_info(qr_code: str) -> QRDecodeResponse:
    """Validates a code and extracts everything it carries for display."""
    validation = validate_qr_code_with_message(qr_code)
    if not validation.is_valid:
        return QRDecodeResponse(is_valid=False, message=validation.message)

    return QRDecodeResponse(
        is_valid=True,
        message=validation.message,
        data=format_qr_code_info(qr_code),
    )
