"""HTTP surface: envelopes, authentication and the order workflow end to end."""

from decimal import Decimal
from urllib.parse import quote

from app.models.enums.order_status import OrderStatus
from app.schemas.sales.sales_quote_schemas import SalesQuoteCreate
from app.services.sales.sales_quote_service import create_sales_quote

from tests.factories import PASSWORD, auth_headers, make_order, make_rfq

PDF_BYTES = b"%PDF-1.4 inspection"


# =====================
# AUTH
# =====================

async def test_health_check(client):
    response = await client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


async def test_missing_token_is_401(client):
    response = await client.get("/orders")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"
    body = response.json()
    assert body["success"] is False
    assert body["error_code"] == "UNAUTHORIZED"


async def test_customer_cannot_use_admin_endpoints(client, customer):
    response = await client.get("/quality-checks/orders", headers=auth_headers(customer))

    assert response.status_code == 403
    assert response.json()["error_code"] == "PERMISSION_DENIED"


async def test_register_login_and_me(client):
    response = await client.post(
        "/auth/register",
        json={
            "email": "new.buyer@example.com",
            "password": "longenough",
            "name": "New Buyer",
            "company_name": "Initech",
        },
    )
    assert response.status_code == 201
    assert response.json()["data"]["role"] == "customer"

    response = await client.post(
        "/auth/login", json={"email": "new.buyer@example.com", "password": "longenough"}
    )
    assert response.status_code == 200
    token = response.json()["data"]["auth"]["access_token"]

    response = await client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.json()["data"]["company_name"] == "Initech"


async def test_wrong_password(client, customer):
    response = await client.post(
        "/auth/login", json={"email": customer.username, "password": PASSWORD + "x"}
    )
    assert response.status_code == 401


# =====================
# ORDERS
# =====================

async def test_order_statuses_endpoint(client, customer):
    response = await client.get("/order-statuses", headers=auth_headers(customer))

    data = response.json()["data"]
    assert [row["status"] for row in data] == [s.value for s in OrderStatus]
    assert data[0]["label"] == "Order Confirmed"


async def test_invalid_status_value_is_422(client, db, admin, customer):
    order = await make_order(db, customer)

    response = await client.patch(
        f"/orders/{order.id}/status",
        json={"status": "teleported"},
        headers=auth_headers(admin),
    )

    assert response.status_code == 422
    assert response.json()["error_code"] == "VALIDATION_ERROR"


async def test_order_list_carries_display_fields(client, db, customer):
    await make_order(db, customer, status=OrderStatus.quality_check)

    response = await client.get("/orders", headers=auth_headers(customer))

    assert response.status_code == 200
    item = response.json()["data"]["items"][0]
    assert item["status_label"] == "Quality Check"
    assert item["status_color"].startswith("bg-orange")
    assert item["progress_percentage"] == 62.5


async def test_quality_gate_over_http(client, db, admin, customer):
    order = await make_order(db, customer, status=OrderStatus.quality_check)
    admin_headers = auth_headers(admin)
    customer_headers = auth_headers(customer)

    response = await client.post(
        f"/orders/{order.id}/quality-check/files",
        files=[("files", ("report.pdf", PDF_BYTES, "application/pdf"))],
        headers=admin_headers,
    )
    assert response.status_code == 201
    file_id = response.json()["data"][0]["id"]

    response = await client.post(f"/orders/{order.id}/move-to-packing", headers=admin_headers)
    assert response.status_code == 409
    assert response.json()["error_code"] == "QUALITY_CHECK_NOT_APPROVED"

    response = await client.get(
        f"/orders/{order.id}/quality-check/files/{file_id}/download", headers=customer_headers
    )
    assert response.status_code == 200
    assert response.content == PDF_BYTES

    response = await client.post(
        f"/orders/{order.id}/quality-check/approval",
        json={"approved": True},
        headers=customer_headers,
    )
    assert response.status_code == 200
    assert response.json()["data"]["quality_check_status"] == "approved"

    response = await client.post(f"/orders/{order.id}/move-to-packing", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["data"]["order_status"] == "packing"


async def test_non_latin_file_name_downloads(client, db, admin, customer):
    order = await make_order(db, customer, status=OrderStatus.quality_check)

    response = await client.post(
        f"/orders/{order.id}/quality-check/files",
        files=[("files", ("检验报告.pdf", PDF_BYTES, "application/pdf"))],
        headers=auth_headers(admin),
    )
    assert response.status_code == 201
    assert response.json()["data"][0]["file_name"] == "检验报告.pdf"
    file_id = response.json()["data"][0]["id"]

    response = await client.get(
        f"/orders/{order.id}/quality-check/files/{file_id}/download",
        headers=auth_headers(customer),
    )
    assert response.status_code == 200
    assert response.content == PDF_BYTES
    disposition = response.headers["content-disposition"]
    assert 'filename="file.pdf"' in disposition
    assert disposition.endswith("filename*=UTF-8''" + quote("检验报告.pdf"))


async def test_partial_shipments_over_http(client, db, admin, customer):
    order = await make_order(db, customer, status=OrderStatus.manufacturing, quantity=100)
    headers = auth_headers(admin)

    response = await client.post(
        f"/orders/{order.id}/shipments", json={"quantity_shipped": 40}, headers=headers
    )
    assert response.status_code == 201

    response = await client.post(
        f"/orders/{order.id}/shipments", json={"quantity_shipped": 61}, headers=headers
    )
    assert response.status_code == 409
    assert response.json()["message"] == "Cannot ship more than remaining quantity"

    response = await client.get(f"/orders/{order.id}/shipments", headers=auth_headers(customer))
    summary = response.json()["data"]["summary"]
    assert summary["total_shipped"] == 40
    assert summary["remaining"] == 60


async def test_invoice_round_trip_over_http(client, db, admin, customer):
    order = await make_order(db, customer)

    response = await client.put(
        f"/orders/{order.id}/invoice",
        files={"file": ("invoice.pdf", b"%PDF-1.4 invoice", "application/pdf")},
        headers=auth_headers(admin),
    )
    assert response.status_code == 200
    assert response.json()["data"]["has_invoice"] is True

    response = await client.get(f"/orders/{order.id}/invoice", headers=auth_headers(customer))
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content == b"%PDF-1.4 invoice"


async def test_other_customer_gets_404(client, db, customer, other_customer):
    order = await make_order(db, customer)

    response = await client.get(f"/orders/{order.id}", headers=auth_headers(other_customer))

    assert response.status_code == 404
    assert response.json()["error_code"] == "ORDER_NOT_FOUND"


async def test_customer_dashboard(client, db, customer):
    await make_order(db, customer, status=OrderStatus.manufacturing)

    response = await client.get("/dashboard/stats", headers=auth_headers(customer))

    assert response.status_code == 200
    assert response.json()["data"]["active_orders"] == 1


# =====================
# RFQ AND QUOTE DOCUMENTS
# =====================

async def test_rfq_attachments_over_http(client, db, admin, customer, other_customer):
    rfq = await make_rfq(db, customer)

    response = await client.post(
        f"/rfqs/{rfq.id}/files",
        files=[("files", ("housing.step", b"ISO-10303-21;", "application/octet-stream"))],
        headers=auth_headers(customer),
    )
    assert response.status_code == 201
    file_id = response.json()["data"][0]["id"]
    assert response.json()["data"][0]["file_type"] == "step"

    response = await client.get(
        f"/rfqs/{rfq.id}/files/{file_id}/download", headers=auth_headers(admin)
    )
    assert response.status_code == 200
    assert response.content == b"ISO-10303-21;"
    assert 'filename="housing.step"' in response.headers["content-disposition"]

    response = await client.get(f"/rfqs/{rfq.id}/files", headers=auth_headers(other_customer))
    assert response.status_code == 404


async def test_purchase_order_document_over_http(client, db, admin, customer):
    rfq = await make_rfq(db, customer)
    sales_quote = await create_sales_quote(
        db, SalesQuoteCreate(rfq_id=rfq.id, amount=Decimal("480.00")), admin
    )

    response = await client.put(
        f"/quotes/{sales_quote.id}/purchase-order",
        data={"purchase_order_number": "7781-A"},
        files={"file": ("po.pdf", b"%PDF-1.4 po", "application/pdf")},
        headers=auth_headers(customer),
    )
    assert response.status_code == 200
    assert response.json()["data"]["has_purchase_order"] is True

    response = await client.post(
        f"/quotes/{sales_quote.id}/respond", json={"accept": True}, headers=auth_headers(customer)
    )
    assert response.json()["data"]["purchase_order_number"] == "7781-A"

    response = await client.get(f"/quotes/{sales_quote.id}/purchase-order", headers=auth_headers(admin))
    assert response.status_code == 200
    assert response.content == b"%PDF-1.4 po"
    assert response.headers["content-type"] == "application/pdf"
    assert 'filename="PO-7781-A.pdf"' in response.headers["content-disposition"]
