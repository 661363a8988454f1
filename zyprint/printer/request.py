"""Print request types and their parsing from host-facing payloads."""
from dataclasses import dataclass, field
from typing import Any, Optional, Tuple, Union

from zyprint.errors import EncodingError

SizeValue = Union[int, str, None]


@dataclass(frozen=True)
class PlainText:
    """Plain text print request."""
    text: str


@dataclass(frozen=True)
class ReceiptItem:
    """Single receipt line."""
    name: str
    price: str = ""


@dataclass(frozen=True)
class ReceiptFormatting:
    """Per-section formatting. Absent values mean normal, non-bold."""
    header_size: SizeValue = None
    item_size: SizeValue = None
    item_bold: bool = False
    total_size: SizeValue = None
    total_bold: bool = False
    footer_size: SizeValue = None

    # host key -> attribute
    SIZE_KEYS = {
        "headerSize": "header_size",
        "itemSize": "item_size",
        "totalSize": "total_size",
        "footerSize": "footer_size",
    }
    BOLD_KEYS = {
        "itemBold": "item_bold",
        "totalBold": "total_bold",
    }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ReceiptFormatting":
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise EncodingError("formatting must be an object")

        kwargs = {}
        for key, attr in cls.SIZE_KEYS.items():
            if key in data:
                kwargs[attr] = data[key]
        for key, attr in cls.BOLD_KEYS.items():
            if key in data:
                value = data[key]
                if not isinstance(value, bool):
                    raise EncodingError(f"formatting.{key} must be a boolean")
                kwargs[attr] = value
        return cls(**kwargs)


@dataclass(frozen=True)
class ReceiptTemplate:
    """Structured receipt with optional sections."""
    header: Optional[str] = None
    items: Tuple[ReceiptItem, ...] = ()
    total: Optional[str] = None
    footer: Optional[str] = None
    formatting: ReceiptFormatting = field(default_factory=ReceiptFormatting)

    @classmethod
    def from_dict(cls, data: Any) -> "ReceiptTemplate":
        """Build a template from the host payload.

        Raises:
            EncodingError: If the payload is malformed.
        """
        if not isinstance(data, dict):
            raise EncodingError("template must be an object")

        items = data.get("items")
        if items is None:
            items = []
        if not isinstance(items, list):
            raise EncodingError("items must be a list")

        return cls(
            header=_section_text(data, "header"),
            items=tuple(_parse_item(item, i) for i, item in enumerate(items)),
            total=_section_text(data, "total"),
            footer=_section_text(data, "footer"),
            formatting=ReceiptFormatting.from_dict(data.get("formatting")),
        )


PrintRequest = Union[PlainText, ReceiptTemplate]


def _section_text(data: dict, key: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    # totals are commonly sent as numbers
    if key == "total" and isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    if not isinstance(value, str):
        raise EncodingError(f"{key} must be a string")
    return value


def _parse_item(item: Any, index: int) -> ReceiptItem:
    if not isinstance(item, dict):
        raise EncodingError(f"items[{index}] must be an object")
    name = item.get("name")
    if not isinstance(name, str):
        raise EncodingError(f"items[{index}].name is required")
    price = item.get("price", "")
    if price is None:
        price = ""
    if isinstance(price, bool) or not isinstance(price, (str, int, float)):
        raise EncodingError(f"items[{index}].price must be a string or number")
    return ReceiptItem(name=name, price=str(price))


def parse_print_request(data: Any) -> PrintRequest:
    """Build a print request from ``{"text": ...}`` or ``{"template": {...}}``."""
    if not isinstance(data, dict):
        raise EncodingError("request must be an object")
    if "template" in data:
        return ReceiptTemplate.from_dict(data["template"])
    text = data.get("text")
    if not isinstance(text, str):
        raise EncodingError("text or template is required")
    return PlainText(text)
