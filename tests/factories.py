"""
Row builders for tests.

They write straight to the session so a test can start an order at any
stage without walking it through the status engine.
"""

from decimal import Decimal

from app.models.enums.order_status import OrderStatus, QualityCheckStatus, PaymentStatus
from app.models.enums.rfq_status import RfqStatus
from app.models.enums.user_role import UserRole
from app.models.orders.order_models import SalesOrder
from app.models.rfq.rfq_models import Rfq
from app.models.users.user_models import User

# hashed once per run
PASSWORD = "secret123"
_password_hash = None


def password_hash() -> str:
    global _password_hash
    if _password_hash is None:
        from app.core.security import hash_password

        _password_hash = hash_password(PASSWORD)
    return _password_hash


async def make_user(db, username: str, role: UserRole = UserRole.customer, **fields) -> User:
    user = User(
        username=username,
        password_hash=password_hash(),
        role=role,
        is_active=True,
        token_version=0,
        **fields,
    )
    db.add(user)
    await db.commit()
    return user


async def make_rfq(db, customer: User, **fields) -> Rfq:
    values = {
        "project_name": "Bracket housing",
        "material": "Aluminium 6061",
        "tolerance": "+/- 0.05 mm",
        "quantity": 100,
        "status": RfqStatus.submitted,
    }
    values.update(fields)
    rfq = Rfq(user_id=customer.id, **values)
    db.add(rfq)
    await db.commit()
    return rfq


_order_seq = 0


async def make_order(
    db,
    customer: User,
    *,
    status: OrderStatus = OrderStatus.pending,
    quality_check_status: QualityCheckStatus = QualityCheckStatus.pending,
    quantity: int = 100,
    is_archived: bool = False,
    **fields,
) -> SalesOrder:
    global _order_seq
    _order_seq += 1

    rfq = await make_rfq(db, customer, quantity=quantity, status=RfqStatus.accepted)
    values = {
        "order_number": f"SORD-99{_order_seq:03d}",
        "project_name": rfq.project_name,
        "material": rfq.material,
        "tolerance": rfq.tolerance,
        "quantity_shipped": 0,
        "quantity_remaining": quantity,
        "amount": Decimal("1250.00"),
        "currency": "USD",
        "payment_status": PaymentStatus.unpaid,
        "version": 1,
    }
    values.update(fields)

    order = SalesOrder(
        user_id=customer.id,
        rfq_id=rfq.id,
        quantity=quantity,
        order_status=status,
        quality_check_status=quality_check_status,
        is_archived=is_archived,
        **values,
    )
    db.add(order)
    await db.commit()
    return order


def auth_headers(user: User) -> dict:
    from app.core.security import create_access_token

    role = UserRole(user.role).value
    token = create_access_token(user.username, user.token_version, role)
    return {"Authorization": f"Bearer {token}"}
