from app.constants.activity_codes import ActivityCode


ACTIVITY_TEMPLATES = {
    # ---------------- AUTH ----------------
    ActivityCode.LOGIN:
        "{actor_role} ({actor_email}) logged in",

    ActivityCode.LOGOUT:
        "{actor_role} ({actor_email}) logged out",

    ActivityCode.REGISTER:
        "Customer {actor_email} registered ({company_name})",

    # ---------------- USERS ----------------
    ActivityCode.CREATE_USER:
        "{actor_role} ({actor_email}) created user {target_email} with role {target_role}",

    ActivityCode.UPDATE_USER_ROLE:
        "{actor_role} ({actor_email}) changed role of {target_email} from {old_role} to {new_role}",

    ActivityCode.UPDATE_USER_EMAIL:
        "{actor_role} ({actor_email}) changed email of {target_email} to {new_email}",

    ActivityCode.UPDATE_USER_PASSWORD:
        "{actor_role} ({actor_email}) reset password for user {target_email}",

    ActivityCode.UPDATE_USER_PROFILE:
        "{actor_role} ({actor_email}) updated profile of {target_email}: {changes}",

    ActivityCode.DEACTIVATE_USER:
        "{actor_role} ({actor_email}) deactivated user {target_email}",

    ActivityCode.REACTIVATE_USER:
        "{actor_role} ({actor_email}) reactivated user {target_email}",

    # ---------------- RFQS ----------------
    ActivityCode.SUBMIT_RFQ:
        "{actor_role} ({actor_email}) submitted RFQ #{rfq_id} for {target_name}",

    ActivityCode.UPDATE_RFQ_STATUS:
        "{actor_role} ({actor_email}) changed RFQ #{rfq_id} status from {old_status} to {new_status}",

    ActivityCode.UPLOAD_RFQ_FILE:
        "{actor_role} ({actor_email}) attached {file_name} to RFQ #{rfq_id}",

    # ---------------- QUOTES ----------------
    ActivityCode.CREATE_QUOTE:
        "{actor_role} ({actor_email}) issued quote {target_name} for RFQ #{rfq_id} ({amount} {currency})",

    ActivityCode.ACCEPT_QUOTE:
        "{actor_role} ({actor_email}) accepted quote {target_name}",

    ActivityCode.DECLINE_QUOTE:
        "{actor_role} ({actor_email}) declined quote {target_name}",

    ActivityCode.EXPIRE_QUOTE:
        "{actor_role} expired quote {target_name}: {changes}",

    ActivityCode.UPLOAD_PURCHASE_ORDER:
        "{actor_role} ({actor_email}) uploaded purchase order {purchase_order_number} for quote {target_name}",

    # ---------------- ORDERS ----------------
    ActivityCode.CREATE_ORDER:
        "{actor_role} ({actor_email}) created order {target_name} for {project_name}",

    ActivityCode.UPDATE_ORDER_STATUS:
        "{actor_role} ({actor_email}) moved order {target_name} from {old_status} to {new_status}",

    ActivityCode.UPDATE_ORDER_TRACKING:
        "{actor_role} ({actor_email}) updated tracking of order {target_name}: {changes}",

    ActivityCode.UPDATE_ORDER_PAYMENT:
        "{actor_role} ({actor_email}) marked order {target_name} as {payment_status}",

    ActivityCode.ARCHIVE_ORDER:
        "Order {target_name} archived after payment",

    ActivityCode.REOPEN_ORDER:
        "{actor_role} ({actor_email}) reopened archived order {target_name}",

    ActivityCode.UPLOAD_INVOICE:
        "{actor_role} ({actor_email}) uploaded invoice {file_name} for order {target_name}",

    ActivityCode.REORDER:
        "{actor_role} ({actor_email}) reordered {target_name} as RFQ #{rfq_id}",

    # ---------------- QUALITY CHECK ----------------
    ActivityCode.UPLOAD_QC_FILE:
        "{actor_role} ({actor_email}) uploaded quality check file {file_name} for order {target_name}",

    ActivityCode.DELETE_QC_FILE:
        "{actor_role} ({actor_email}) deleted quality check file {file_name} from order {target_name}",

    ActivityCode.APPROVE_QUALITY_CHECK:
        "{actor_role} ({actor_email}) approved quality check for order {target_name}",

    ActivityCode.REJECT_QUALITY_CHECK:
        "{actor_role} ({actor_email}) requested revision for order {target_name}: {notes}",

    ActivityCode.RESTART_QUALITY_CHECK:
        "Quality check for order {target_name} reopened for customer review",

    # ---------------- SHIPMENTS ----------------
    ActivityCode.CREATE_SHIPMENT:
        "{actor_role} ({actor_email}) shipped {quantity} units of order {target_name} ({remaining} remaining)",

    ActivityCode.UPDATE_SHIPMENT_TRACKING:
        "{actor_role} ({actor_email}) set shipment #{shipment_id} of order {target_name} to {tracking_status}",

    ActivityCode.DELIVER_SHIPMENT:
        "{actor_role} ({actor_email}) marked shipment #{shipment_id} of order {target_name} delivered",
}
