import base64
import logging
import os
import time
from dataclasses import dataclass
from io import BytesIO
from typing import Iterable, Optional

from barcode import Code128
from barcode.writer import ImageWriter, SVGWriter

from app.config import settings

logger = logging.getLogger(__name__)

# Roughly the bar width/height the printed coupons were designed for
WRITER_OPTIONS = {"module_width": 0.4, "module_height": 15.0, "quiet_zone": 4.0}


@dataclass
class BarcodeArtifacts:
    png_path: Optional[str] = None
    svg_path: Optional[str] = None
    base64: Optional[str] = None

    def paths(self):
        return [p for p in (self.png_path, self.svg_path) if p]


class BarcodeService:
    """Renders Code128 barcodes to PNG/SVG files and a base64 data URL."""

    def __init__(self, output_dir: Optional[str] = None):
        self.output_dir = output_dir or settings.BARCODE_DIR
        os.makedirs(self.output_dir, exist_ok=True)

    def _render_bytes(self, text: str, fmt: str) -> bytes:
        writer = SVGWriter() if fmt == "svg" else ImageWriter()
        buf = BytesIO()
        Code128(text, writer=writer).write(buf, options=WRITER_OPTIONS)
        return buf.getvalue()

    def render_file(self, text: str, fmt: str = "png") -> Optional[str]:
        try:
            filename = f"barcode_{text}_{int(time.time())}.{fmt}"
            path = os.path.join(self.output_dir, filename)
            with open(path, "wb") as fh:
                fh.write(self._render_bytes(text, fmt))
            return path
        except Exception:
            logger.exception("Error generating barcode %s image for %s", fmt, text)
            return None

    def render_base64(self, text: str) -> Optional[str]:
        try:
            data = self._render_bytes(text, "png")
            return "data:image/png;base64," + base64.b64encode(data).decode("ascii")
        except Exception:
            logger.exception("Error generating barcode base64 for %s", text)
            return None

    def render(self, text: str) -> BarcodeArtifacts:
        """All formats; a failed format is logged and left as None."""
        return BarcodeArtifacts(
            png_path=self.render_file(text, "png"),
            svg_path=self.render_file(text, "svg"),
            base64=self.render_base64(text),
        )

    def delete_files(self, paths: Iterable[Optional[str]]) -> None:
        for path in paths:
            if path and os.path.exists(path):
                try:
                    os.remove(path)
                except OSError:
                    logger.warning("Could not delete barcode file %s", path)


_service: Optional[BarcodeService] = None


def get_barcode_service() -> BarcodeService:
    global _service
    if _service is None:
        _service = BarcodeService()
    return _service
