import base64
import io

import qrcode

DISPLAY_CODE_PREFIX = "ATT-"


def display_code(instance_id: str) -> str:
    """Short code shown in the QR image; never the signed token"""
    return f"{DISPLAY_CODE_PREFIX}{instance_id}"


def instance_id_from_code(code: str) -> str:
    if code.startswith(DISPLAY_CODE_PREFIX):
        return code[len(DISPLAY_CODE_PREFIX):]
    return code


def render_qr_data_url(value: str, box_size: int = 10, border: int = 4) -> str:
    """PNG QR code as a data: URL the frontend can drop into <img src>"""
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(value)
    qr.make(fit=True)

    image = qr.make_image(fill_color="black", back_color="white")
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/png;base64,{encoded}"
