"""Renders print requests to ESC/POS commands and text previews."""
from zyprint.errors import EncodingError
from zyprint.printer.escpos import encode_receipt, encode_text
from zyprint.printer.request import PlainText, PrintRequest, ReceiptTemplate


class ReceiptRenderer:
    """Renders print requests.

    ``render`` produces the exact bytes for the printer, ``render_preview``
    a plain-text approximation of the printed paper for history and the
    preview endpoint.
    """

    def __init__(self, width: int = 48):
        """Initialize renderer.

        Args:
            width: Character width per line
        """
        self.width = width

    def render(self, request: PrintRequest) -> bytes:
        """Render request to ESC/POS bytes.

        Raises:
            EncodingError: If the request is not a known print request.
        """
        if isinstance(request, PlainText):
            return encode_text(request.text)
        if isinstance(request, ReceiptTemplate):
            return encode_receipt(request)
        raise EncodingError(f"Unsupported print request: {type(request).__name__}")

    def render_preview(self, request: PrintRequest) -> str:
        """Render request to plain text preview."""
        if isinstance(request, PlainText):
            return request.text
        if not isinstance(request, ReceiptTemplate):
            raise EncodingError(f"Unsupported print request: {type(request).__name__}")

        lines = []
        if request.header is not None:
            for line in request.header.split("\n"):
                lines.append(self._align_text(line, "center"))
            lines.append("")

        for item in request.items:
            lines.append(self._item_line(item.name, item.price))

        if request.total is not None:
            lines.append("")
            lines.append(f"Total: {request.total}")

        if request.footer is not None:
            lines.extend(request.footer.split("\n"))

        lines.append("")
        lines.append("--- CUT ---")
        return "\n".join(lines)

    def _item_line(self, name: str, price: str) -> str:
        """Lay out an item with its price pushed to the right edge."""
        gap = self.width - len(name) - len(price)
        if gap < 1:
            return f"{name} {price}"
        return name + " " * gap + price

    def _align_text(self, text: str, alignment: str) -> str:
        """Align text for preview."""
        text = text.rstrip()
        if not text:
            return ""
        if alignment == "center":
            return text.center(self.width)
        return text
