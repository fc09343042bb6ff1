from typing import Optional
from urllib.parse import urlencode

from hojaverde.core.config import PUBLIC_BASE_URL

QR_IMAGE_SERVICE = "https://api.qrserver.com/v1/create-qr-code/"
# brand green on white
QR_COLOR = "2D5016"
QR_BACKGROUND = "FFFFFF"


def generate_qr_code_url(qr_code: str, size: int = 200) -> str:
    """Image URL rendering ``qr_code`` through the public QR service."""
    params = {
        "size": f"{size}x{size}",
        "data": qr_code,
        "format": "png",
        "margin": "10",
        "color": QR_COLOR,
        "bgcolor": QR_BACKGROUND,
    }
    return f"{QR_IMAGE_SERVICE}?{urlencode(params)}"


def create_shareable_product_url(product_id: int, base_url: Optional[str] = None) -> str:
    base = (base_url or PUBLIC_BASE_URL).rstrip("/")
    return f"{base}/producto/{product_id}"


def generate_product_page_qr_url(product_id: int, base_url: Optional[str] = None, size: int = 200) -> str:
    return generate_qr_code_url(create_shareable_product_url(product_id, base_url), size)
