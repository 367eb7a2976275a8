from enum import Enum


class OrderStatus(str, Enum):
    confirmed = "confirmed"
    processing = "processing"
    shipped = "shipped"
    delivered = "delivered"
    cancelled = "cancelled"


class BulkBuyStatus(str, Enum):
    pending_approval = "pending_approval"
    approved = "approved"
    rejected = "rejected"


class DeliveryMethod(str, Enum):
    office = "office"
    delivery = "delivery"


class CheckoutPath(str, Enum):
    points = "points"
    copay = "copay"
    bulk_buy = "bulk_buy"
