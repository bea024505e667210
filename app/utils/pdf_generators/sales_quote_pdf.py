import io
from decimal import Decimal

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle
from xml.sax.saxutils import escape

from app.models.rfq.rfq_models import Rfq
from app.models.sales.sales_quote_models import SalesQuote
from app.models.users.user_models import User

COMPANY_NAME = "S-Hub Manufacturing"
COMPANY_TAGLINE = "Precision parts, sourced and finished to order"


def _text(value) -> str:
    return escape(str(value)) if value not in (None, "") else "-"


def render_sales_quote_pdf(quote: SalesQuote, rfq: Rfq, customer: User | None) -> bytes:
    """Render a customer-facing quote document and return the PDF bytes."""
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=30,
        leftMargin=30,
        topMargin=30,
        bottomMargin=30,
        title=f"Quote {quote.quote_number}",
    )
    styles = getSampleStyleSheet()
    elements = []

    # -------------------------------
    # Header
    # -------------------------------
    elements.append(Paragraph(f"<b>{COMPANY_NAME}</b>", styles["Title"]))
    elements.append(Paragraph(COMPANY_TAGLINE, styles["Normal"]))
    elements.append(Spacer(1, 12))

    elements.append(Paragraph(f"<b>Quote #: </b>{_text(quote.quote_number)}", styles["Heading2"]))
    elements.append(Paragraph(f"Valid until: {quote.valid_until.strftime('%d %b %Y')}", styles["Normal"]))
    if quote.estimated_delivery_date:
        elements.append(
            Paragraph(
                f"Estimated delivery: {quote.estimated_delivery_date.strftime('%d %b %Y')}",
                styles["Normal"],
            )
        )
    elements.append(Spacer(1, 10))

    # -------------------------------
    # Customer
    # -------------------------------
    if customer:
        elements.append(Paragraph("<b>Prepared for</b>", styles["Heading3"]))
        elements.append(Paragraph(_text(customer.name or customer.username), styles["Normal"]))
        if customer.company_name:
            elements.append(Paragraph(_text(customer.company_name), styles["Normal"]))
        elements.append(Paragraph(_text(customer.username), styles["Normal"]))
        elements.append(Spacer(1, 12))

    # -------------------------------
    # Part specification
    # -------------------------------
    spec_rows = [
        ["Project", _text(rfq.project_name)],
        ["Material", _text(rfq.material)],
        ["Material grade", _text(rfq.material_grade)],
        ["Finishing", _text(rfq.finishing)],
        ["Tolerance", _text(rfq.tolerance)],
        ["Process", _text(rfq.manufacturing_process)],
        ["Quantity", str(rfq.quantity)],
    ]
    spec_table = Table(spec_rows, colWidths=[120, 380])
    spec_table.setStyle(
        TableStyle([
            ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
            ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
            ("BACKGROUND", (0, 0), (0, -1), colors.whitesmoke),
        ])
    )
    elements.append(spec_table)
    elements.append(Spacer(1, 16))

    # -------------------------------
    # Price
    # -------------------------------
    amount = Decimal(quote.amount or 0)
    unit_price = (amount / rfq.quantity).quantize(Decimal("0.01")) if rfq.quantity else amount

    price_rows = [
        ["Quantity", "Unit price", "Total"],
        [str(rfq.quantity), f"{unit_price:,.2f} {quote.currency}", f"{amount:,.2f} {quote.currency}"],
    ]
    price_table = Table(price_rows, colWidths=[120, 190, 190])
    price_table.setStyle(
        TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.grey),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("ALIGN", (0, 0), (-1, -1), "CENTER"),
            ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
        ])
    )
    elements.append(price_table)
    elements.append(Spacer(1, 20))

    if quote.notes:
        elements.append(Paragraph("<b>Notes</b>", styles["Heading3"]))
        elements.append(Paragraph(_text(quote.notes), styles["Normal"]))

    doc.build(elements)
    return buffer.getvalue()
