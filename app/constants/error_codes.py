import enum


class ErrorCode(str, enum.Enum):
    # ---------------- GENERIC ----------------
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # ---------------- USERS ----------------
    USER_NOT_FOUND = "USER_NOT_FOUND"
    USER_ROLE_INVALID = "USER_ROLE_INVALID"
    USER_EMAIL_EXISTS = "USER_EMAIL_EXISTS"
    USER_VERSION_CONFLICT = "USER_VERSION_CONFLICT"

    # ---------------- RFQS ----------------
    RFQ_NOT_FOUND = "RFQ_NOT_FOUND"
    RFQ_INVALID_STATE = "RFQ_INVALID_STATE"
    RFQ_FILE_NOT_FOUND = "RFQ_FILE_NOT_FOUND"
    RFQ_FILE_INVALID = "RFQ_FILE_INVALID"

    # ---------------- QUOTES ----------------
    QUOTE_NOT_FOUND = "QUOTE_NOT_FOUND"
    QUOTE_INVALID_STATE = "QUOTE_INVALID_STATE"
    QUOTE_EXPIRED = "QUOTE_EXPIRED"
    PURCHASE_ORDER_NOT_FOUND = "PURCHASE_ORDER_NOT_FOUND"
    PURCHASE_ORDER_INVALID_FILE = "PURCHASE_ORDER_INVALID_FILE"

    # ---------------- ORDERS ----------------
    ORDER_NOT_FOUND = "ORDER_NOT_FOUND"
    ORDER_ALREADY_EXISTS = "ORDER_ALREADY_EXISTS"
    ORDER_INVALID_STATE = "ORDER_INVALID_STATE"
    ORDER_INVALID_TRANSITION = "ORDER_INVALID_TRANSITION"
    ORDER_VERSION_CONFLICT = "ORDER_VERSION_CONFLICT"
    ORDER_ARCHIVED = "ORDER_ARCHIVED"
    INVOICE_INVALID_FILE = "INVOICE_INVALID_FILE"
    INVOICE_NOT_FOUND = "INVOICE_NOT_FOUND"

    # ---------------- QUALITY CHECK ----------------
    QUALITY_CHECK_NOT_APPROVED = "QUALITY_CHECK_NOT_APPROVED"
    QUALITY_CHECK_ALREADY_DECIDED = "QUALITY_CHECK_ALREADY_DECIDED"
    QUALITY_CHECK_FILE_NOT_FOUND = "QUALITY_CHECK_FILE_NOT_FOUND"
    QUALITY_CHECK_FILE_INVALID = "QUALITY_CHECK_FILE_INVALID"

    # ---------------- SHIPMENTS ----------------
    SHIPMENT_NOT_FOUND = "SHIPMENT_NOT_FOUND"
    SHIPMENT_QUANTITY_EXCEEDED = "SHIPMENT_QUANTITY_EXCEEDED"
    SHIPMENT_INVALID_STATE = "SHIPMENT_INVALID_STATE"

    # ---------------- STORAGE ----------------
    STORAGE_ERROR = "STORAGE_ERROR"
