"""Database models."""
import json
from datetime import datetime
from zyprint import db


class PrintHistory(db.Model):
    """Print history model."""
    __tablename__ = "print_history"

    id = db.Column(db.Integer, primary_key=True)
    identifier = db.Column(db.String(64), nullable=False, index=True)
    kind = db.Column(db.String(20), nullable=False)  # text, receipt
    request_json = db.Column(db.Text, nullable=True)  # JSON of the request payload
    rendered_preview = db.Column(db.Text, nullable=True)  # Text preview of what was printed
    status = db.Column(db.String(20), nullable=False)  # success, failed
    error_kind = db.Column(db.String(40), nullable=True)
    error_message = db.Column(db.Text, nullable=True)
    printed_at = db.Column(db.DateTime, default=datetime.utcnow)

    @property
    def request_data(self):
        """Parse request JSON."""
        return json.loads(self.request_json) if self.request_json else {}

    @request_data.setter
    def request_data(self, value):
        """Set request as JSON."""
        self.request_json = json.dumps(value)

    def to_dict(self):
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "identifier": self.identifier,
            "kind": self.kind,
            "request": self.request_data,
            "rendered_preview": self.rendered_preview,
            "status": self.status,
            "error_kind": self.error_kind,
            "error_message": self.error_message,
            "printed_at": self.printed_at.isoformat() if self.printed_at else None,
        }

    def __repr__(self):
        return f"<PrintHistory {self.id} ({self.status})>"
