# app/models/enums/sales_quote_status.py
import enum


class SalesQuoteStatus(str, enum.Enum):
    pending = "pending"
    accepted = "accepted"
    declined = "declined"
    expired = "expired"
