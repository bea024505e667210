# app/models/enums/shipment_status.py
import enum


class ShipmentStatus(str, enum.Enum):
    shipped = "shipped"
    delivered = "delivered"
