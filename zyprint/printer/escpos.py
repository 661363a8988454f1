"""ESC/POS command builder for thermal receipt printers."""
from typing import Union

from zyprint.printer.request import ReceiptTemplate


# Character size codes for GS ! n, keyed by the values a template may carry
SIZE_NORMAL = 0x00
SIZE_LARGE = 0x11
SIZE_XLARGE = 0x22
SIZE_XXLARGE = 0x33

SIZE_CODES = {
    1: SIZE_NORMAL,
    2: SIZE_LARGE,
    3: SIZE_XLARGE,
    4: SIZE_XXLARGE,
    "normal": SIZE_NORMAL,
    "large": SIZE_LARGE,
    "xlarge": SIZE_XLARGE,
}


def map_size(size: Union[int, str, None]) -> int:
    """Map a template size value to its GS ! code.

    Unknown values fall back to the normal size.
    """
    # bool is an int subclass; True must not select size 1
    if isinstance(size, bool) or not isinstance(size, (int, str)):
        return SIZE_NORMAL
    return SIZE_CODES.get(size, SIZE_NORMAL)


class ESCPOSBuilder:
    """Builder for ESC/POS printer commands."""

    # ESC/POS Command Constants
    ESC = b'\x1b'
    GS = b'\x1d'
    DLE = b'\x10'

    # Initialize printer
    INIT = ESC + b'\x40'  # ESC @

    # Text formatting
    BOLD_ON = ESC + b'\x45\x01'   # ESC E 1
    BOLD_OFF = ESC + b'\x45\x00'  # ESC E 0
    SIZE = GS + b'\x21'           # GS ! n

    # Alignment
    ALIGN_LEFT = ESC + b'\x61\x00'    # ESC a 0
    ALIGN_CENTER = ESC + b'\x61\x01'  # ESC a 1

    # Paper control
    CUT_FULL = GS + b'\x56\x41\x10'  # GS V A 16 - feed and full cut
    FEED_LINE = b'\n'
    TRAILING_FEED = 3

    # Real-time status transmission, printer status
    STATUS_INQUIRY = DLE + b'\x04\x01'  # DLE EOT 1

    def __init__(self, initialize: bool = True):
        """Initialize builder.

        Args:
            initialize: Start the buffer with the printer reset sequence.
        """
        self._buffer = bytearray()
        self._alignment = None
        if initialize:
            self._buffer.extend(self.INIT)

    # Text formatting methods

    def text(self, content: str) -> "ESCPOSBuilder":
        """Add text, UTF-8 encoded and otherwise untouched."""
        self._buffer.extend(content.encode("utf-8"))
        return self

    def newline(self, count: int = 1) -> "ESCPOSBuilder":
        """Add newline(s)."""
        self._buffer.extend(self.FEED_LINE * count)
        return self

    def bold(self, on: bool = True) -> "ESCPOSBuilder":
        """Set bold mode."""
        self._buffer.extend(self.BOLD_ON if on else self.BOLD_OFF)
        return self

    def size(self, code: int) -> "ESCPOSBuilder":
        """Select character size by raw GS ! code."""
        self._buffer.extend(self.SIZE)
        self._buffer.append(code & 0xff)
        return self

    # Alignment methods

    def align_left(self) -> "ESCPOSBuilder":
        """Set left alignment if not already active."""
        return self._align(self.ALIGN_LEFT)

    def align_center(self) -> "ESCPOSBuilder":
        """Set center alignment if not already active."""
        return self._align(self.ALIGN_CENTER)

    def _align(self, command: bytes) -> "ESCPOSBuilder":
        if self._alignment != command:
            self._buffer.extend(command)
            self._alignment = command
        return self

    def section(self, content: str, size: int = SIZE_NORMAL,
                bold: bool = False) -> "ESCPOSBuilder":
        """Add a block of text wrapped in its size and emphasis commands.

        Size and emphasis are only switched when they differ from the
        defaults, and are switched back in reverse order afterwards.
        """
        if size != SIZE_NORMAL:
            self.size(size)
        if bold:
            self.bold(True)
        self.text(content)
        if bold:
            self.bold(False)
        if size != SIZE_NORMAL:
            self.size(SIZE_NORMAL)
        return self

    # Paper control

    def cut(self) -> "ESCPOSBuilder":
        """Feed past the cutter and cut the paper."""
        self._buffer.extend(self.FEED_LINE * self.TRAILING_FEED)
        self._buffer.extend(self.CUT_FULL)
        return self

    def raw(self, data: bytes) -> "ESCPOSBuilder":
        """Append raw command bytes."""
        self._buffer.extend(data)
        return self

    # Build output

    def build(self) -> bytes:
        """Build and return the command buffer."""
        return bytes(self._buffer)

    def __bytes__(self) -> bytes:
        """Allow bytes() conversion."""
        return self.build()

    def __len__(self) -> int:
        """Return buffer length."""
        return len(self._buffer)


def encode_text(text: str) -> bytes:
    """Render plain text as a complete print job.

    Control bytes embedded in ``text`` are passed through as-is.
    """
    return ESCPOSBuilder().text(text).cut().build()


def encode_receipt(template: ReceiptTemplate) -> bytes:
    """Render a receipt template as a complete print job.

    Sections appear in the fixed order header, items, total, footer.
    Absent sections produce no bytes at all, alignment included.
    """
    fmt = template.formatting
    builder = ESCPOSBuilder()

    if template.header is not None:
        builder.align_center()
        builder.section(template.header + "\n\n", size=map_size(fmt.header_size))

    if template.items:
        builder.align_left()
        lines = "".join(f"{item.name}\t{item.price}\n" for item in template.items)
        builder.section(lines, size=map_size(fmt.item_size), bold=fmt.item_bold)

    if template.total is not None:
        builder.align_left()
        builder.section(f"\nTotal: {template.total}\n",
                        size=map_size(fmt.total_size), bold=fmt.total_bold)

    if template.footer is not None:
        builder.align_left()
        builder.section(template.footer + "\n", size=map_size(fmt.footer_size))

    return builder.cut().build()


def encode_status_probe() -> bytes:
    """Return the status inquiry command."""
    return ESCPOSBuilder.STATUS_INQUIRY
