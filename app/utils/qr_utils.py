"""
QR code images for report retrieval links
"""
import io

import qrcode
from PIL import Image

QR_SIZE = 300  # pixels
QR_BORDER = 2  # modules


def render_qr_png(data, size=QR_SIZE, border=QR_BORDER):
    """
    Encode ``data`` as a black-on-white QR code PNG of a fixed pixel size

    Modules are drawn at a whole number of pixels and centred on a white
    square of ``size``; only codes too large for one pixel per module are
    scaled down.

    Returns:
        bytes: PNG image
    """
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=1,
        border=border,
    )
    qr.add_data(data)
    qr.make(fit=True)

    modules = qr.modules_count + 2 * border
    qr.box_size = max(1, size // modules)
    img = qr.make_image(fill_color="black", back_color="white").get_image().convert('L')

    if img.size[0] > size:
        img = img.resize((size, size), Image.NEAREST)
    elif img.size[0] < size:
        canvas = Image.new('L', (size, size), 255)
        offset = (size - img.size[0]) // 2
        canvas.paste(img, (offset, offset))
        img = canvas

    buffer = io.BytesIO()
    img.save(buffer, format='PNG')
    return buffer.getvalue()
