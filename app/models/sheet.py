"""
Project Status Dashboard
Sheet range model — the key/value range behind the persistence gateway.

Models:
    - SheetRow: one row of a two-column range (column A = key, column B = value)

Row 1 of every sheet is the ``key | value`` header; data rows start at 2.
"""

from datetime import datetime, timezone

from app.models import db

HEADER_KEY = "key"
HEADER_VALUE = "value"
FIRST_DATA_ROW = 2


class SheetRow(db.Model):
    """A single row of a named sheet's A:B range."""

    __tablename__ = "sheet_rows"
    __table_args__ = (
        db.UniqueConstraint("sheet", "row_number", name="uq_sheet_rows_sheet_row"),
    )

    id = db.Column(db.Integer, primary_key=True)
    sheet = db.Column(db.String(100), nullable=False, index=True, default="Sheet1")
    row_number = db.Column(db.Integer, nullable=False, comment="1-based, row 1 is the header")
    key = db.Column(db.String(255), nullable=True, comment="Column A")
    value = db.Column(db.Text, nullable=True, comment="Column B; NULL behaves like an empty cell")
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    @property
    def is_header(self):
        return self.key == HEADER_KEY

    def to_dict(self):
        return {
            "sheet": self.sheet,
            "row_number": self.row_number,
            "key": self.key,
            "value": self.value,
        }

    def __repr__(self):
        return f"<SheetRow {self.sheet}!{self.row_number} {self.key!r}>"
