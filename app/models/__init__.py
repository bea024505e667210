# users and auth
from app.models.users.user_models import User, RefreshToken
from app.models.support.activity_models import UserActivity

# rfqs and quotes
from app.models.rfq.rfq_models import Rfq
from app.models.rfq.rfq_file_models import RfqFile
from app.models.sales.sales_quote_models import SalesQuote

# orders
from app.models.orders.order_models import SalesOrder
from app.models.orders.shipment_models import Shipment
from app.models.orders.quality_check_models import QualityCheckFile
