# Import SQLAlchemy models so they register on Base.metadata
from checkout_api.models.order import OrderRecord, OrderStatus  # noqa: F401
