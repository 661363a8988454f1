"""REST API endpoints exposing printer operations to host applications."""
import logging

from flask import Blueprint, request, jsonify
from zyprint import db, get_service
from zyprint.errors import (
    ConnectError,
    DiscoveryError,
    EncodingError,
    NotConnected,
    PermissionDenied,
    PrinterError,
    WriteFailed,
)
from zyprint.models import PrintHistory
from zyprint.printer import PlainText, ReceiptTemplate, parse_print_request

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)

ERROR_STATUS = {
    EncodingError: 400,
    PermissionDenied: 403,
    NotConnected: 409,
    ConnectError: 502,
    WriteFailed: 502,
    DiscoveryError: 500,
}


@api_bp.errorhandler(PrinterError)
def handle_printer_error(error):
    """Report printer errors as structured results."""
    status = 500
    for error_type, code in ERROR_STATUS.items():
        if isinstance(error, error_type):
            status = code
            break
    return jsonify(error.to_dict()), status


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _require(data: dict, *names):
    """Return the missing parameter names."""
    return [name for name in names if data.get(name) is None]


def _bad_identifier(data: dict):
    """Return an error response unless the identifier is a non-empty string."""
    identifier = data.get("identifier")
    if identifier is None:
        return jsonify({"error": "Missing identifier parameter"}), 400
    if not isinstance(identifier, str) or not identifier.strip():
        return jsonify({"error": "identifier must be a non-empty string"}), 400
    return None


@api_bp.route("/echo", methods=["POST"])
def echo():
    """Echo a value back."""
    data = _json_body()
    return jsonify({"value": get_service().echo(data.get("value"))})


# Discovery API

@api_bp.route("/printers", methods=["GET"])
def list_printers():
    """List bonded Bluetooth printers."""
    printers = get_service().discover()
    return jsonify({
        "printers": [p.to_dict() for p in printers]
    })


@api_bp.route("/printers/network", methods=["GET"])
def list_network_printers():
    """Probe a network range for printers.

    Query params:
    - range: IPv4 network in CIDR notation (e.g. 192.168.1.0/24)
    """
    network_range = request.args.get("range")
    if not network_range:
        return jsonify({"error": "range is required"}), 400
    try:
        printers = get_service().discover_network(network_range)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify({
        "printers": [p.to_dict() for p in printers]
    })


# Connection API

@api_bp.route("/connect", methods=["POST"])
def connect():
    """Connect to a printer.

    Request body:
    {
        "identifier": "00:11:22:33:44:55"  // or "192.168.1.100"
    }
    """
    data = _json_body()
    error = _bad_identifier(data)
    if error:
        return error

    get_service().connect(data["identifier"])
    return jsonify({"connected": True})


@api_bp.route("/disconnect", methods=["POST"])
def disconnect():
    """Disconnect from a printer."""
    data = _json_body()
    error = _bad_identifier(data)
    if error:
        return error

    get_service().disconnect(data["identifier"])
    return jsonify({"disconnected": True})


@api_bp.route("/status/<identifier>", methods=["GET"])
def printer_status(identifier):
    """Get coarse printer status."""
    return jsonify(get_service().status(identifier).to_dict())


# Print API

@api_bp.route("/print/text", methods=["POST"])
def print_text():
    """Print plain text.

    Request body:
    {
        "identifier": "00:11:22:33:44:55",
        "text": "Hello"
    }
    """
    data = _json_body()
    if _require(data, "identifier", "text"):
        return jsonify({"error": "Missing required parameters"}), 400
    error = _bad_identifier(data)
    if error:
        return error
    return _print(data["identifier"], {"text": data["text"]})


@api_bp.route("/print/receipt", methods=["POST"])
def print_receipt():
    """Print a receipt.

    Request body:
    {
        "identifier": "00:11:22:33:44:55",
        "template": {
            "header": "My Shop",
            "items": [{"name": "Coffee", "price": "3.50"}],
            "total": "3.50",
            "footer": "Thank you!",
            "formatting": {"headerSize": "large", "totalBold": true}
        }
    }
    """
    data = _json_body()
    if _require(data, "identifier", "template"):
        return jsonify({"error": "Missing required parameters"}), 400
    error = _bad_identifier(data)
    if error:
        return error
    return _print(data["identifier"], {"template": data["template"]})


def _print(identifier: str, payload: dict):
    """Render, send and record a print request."""
    service = get_service()

    # Malformed requests are rejected before any I/O and not recorded
    print_request = parse_print_request(payload)
    preview = service.renderer.render_preview(print_request)

    history = PrintHistory(
        identifier=identifier,
        kind="receipt" if isinstance(print_request, ReceiptTemplate) else "text",
        rendered_preview=preview,
    )
    history.request_data = payload

    try:
        service.print(identifier, print_request)
    except PrinterError as e:
        history.status = "failed"
        history.error_kind = e.kind
        history.error_message = e.message
        db.session.add(history)
        db.session.commit()
        logger.warning("Print on %s failed: %s", identifier, e.message)
        raise

    history.status = "success"
    db.session.add(history)
    db.session.commit()

    return jsonify({
        "success": True,
        "history_id": history.id,
    })


@api_bp.route("/preview", methods=["POST"])
def preview_receipt():
    """Preview a print request without printing.

    Request body:
    {
        "text": "..."
    }
    OR
    {
        "template": {...}
    }
    """
    print_request = parse_print_request(_json_body())
    return jsonify({
        "preview": get_service().renderer.render_preview(print_request),
        "kind": "text" if isinstance(print_request, PlainText) else "receipt",
    })


# History API

@api_bp.route("/history", methods=["GET"])
def list_history():
    """List print history.

    Query params:
    - page: Page number (default: 1)
    - per_page: Items per page (default: 20, max: 100)
    - status: Filter by status (success/failed)
    - identifier: Filter by printer
    """
    page = request.args.get("page", 1, type=int)
    per_page = min(request.args.get("per_page", 20, type=int), 100)

    query = PrintHistory.query.order_by(PrintHistory.printed_at.desc(), PrintHistory.id.desc())

    status = request.args.get("status")
    if status:
        query = query.filter_by(status=status)

    identifier = request.args.get("identifier")
    if identifier:
        query = query.filter_by(identifier=identifier)

    pagination = query.paginate(page=page, per_page=per_page, error_out=False)

    return jsonify({
        "history": [h.to_dict() for h in pagination.items],
        "page": pagination.page,
        "pages": pagination.pages,
        "total": pagination.total,
        "has_next": pagination.has_next,
        "has_prev": pagination.has_prev
    })


@api_bp.route("/history/<int:history_id>", methods=["GET"])
def get_history(history_id):
    """Get a specific history record."""
    record = db.get_or_404(PrintHistory, history_id)
    return jsonify(record.to_dict())
