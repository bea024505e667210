# app/models/enums/rfq_status.py
import enum


class RfqStatus(str, enum.Enum):
    submitted = "submitted"
    quoted = "quoted"
    accepted = "accepted"
    declined = "declined"
