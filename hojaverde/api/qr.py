from fastapi import APIRouter

from hojaverde.qr.codec import extract_qr_info
from hojaverde.schemas.qr import QRDecodeResponse

router = APIRouter()


@router.get(
    "/decode/{qr_code:path}",
    response_model=QRDecodeResponse,
    summary="Validate and decode a QR code",
    description="Checks the code format and returns whatever it carries, without touching the database.",
)
def decode_qr(qr_code: str):
    return extract_qr_info(qr_code)
