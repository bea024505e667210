import enum


class ActivityCode(str, enum.Enum):
    # auth
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    REGISTER = "REGISTER"

    # users
    CREATE_USER = "CREATE_USER"
    UPDATE_USER_ROLE = "UPDATE_USER_ROLE"
    UPDATE_USER_EMAIL = "UPDATE_USER_EMAIL"
    UPDATE_USER_PASSWORD = "UPDATE_USER_PASSWORD"
    UPDATE_USER_PROFILE = "UPDATE_USER_PROFILE"
    DEACTIVATE_USER = "DEACTIVATE_USER"
    REACTIVATE_USER = "REACTIVATE_USER"

    # rfqs
    SUBMIT_RFQ = "SUBMIT_RFQ"
    UPDATE_RFQ_STATUS = "UPDATE_RFQ_STATUS"
    UPLOAD_RFQ_FILE = "UPLOAD_RFQ_FILE"

    # quotes
    CREATE_QUOTE = "CREATE_QUOTE"
    ACCEPT_QUOTE = "ACCEPT_QUOTE"
    DECLINE_QUOTE = "DECLINE_QUOTE"
    EXPIRE_QUOTE = "EXPIRE_QUOTE"
    UPLOAD_PURCHASE_ORDER = "UPLOAD_PURCHASE_ORDER"

    # orders
    CREATE_ORDER = "CREATE_ORDER"
    UPDATE_ORDER_STATUS = "UPDATE_ORDER_STATUS"
    UPDATE_ORDER_TRACKING = "UPDATE_ORDER_TRACKING"
    UPDATE_ORDER_PAYMENT = "UPDATE_ORDER_PAYMENT"
    ARCHIVE_ORDER = "ARCHIVE_ORDER"
    REOPEN_ORDER = "REOPEN_ORDER"
    UPLOAD_INVOICE = "UPLOAD_INVOICE"
    REORDER = "REORDER"

    # quality check
    UPLOAD_QC_FILE = "UPLOAD_QC_FILE"
    DELETE_QC_FILE = "DELETE_QC_FILE"
    APPROVE_QUALITY_CHECK = "APPROVE_QUALITY_CHECK"
    REJECT_QUALITY_CHECK = "REJECT_QUALITY_CHECK"
    RESTART_QUALITY_CHECK = "RESTART_QUALITY_CHECK"

    # shipments
    CREATE_SHIPMENT = "CREATE_SHIPMENT"
    UPDATE_SHIPMENT_TRACKING = "UPDATE_SHIPMENT_TRACKING"
    DELIVER_SHIPMENT = "DELIVER_SHIPMENT"
