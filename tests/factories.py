import uuid
from decimal import Decimal

from portal.core.errors import PaymentError
from portal.core.security import create_access_token
from portal.models.branding import Branding
from portal.models.campaign import Campaign, CampaignProduct
from portal.models.employee import Employee
from portal.models.order import CartItem, PaymentIntent
from portal.models.product import Product
from portal.services.payment_gateway import PaymentSession, PaymentStatus


class FakeGateway:
    """Stands in for PhonePeGateway; records calls and returns canned answers."""

    def __init__(self, paid_amount_inr=0, success=True):
        self.paid_amount_inr = paid_amount_inr
        self.success = success
        self.initiated = []
        self.checked = []

    def initiate_payment(self, merchant_transaction_id, amount_inr, **kwargs):
        self.initiated.append((merchant_transaction_id, amount_inr, kwargs))
        return PaymentSession(
            merchant_transaction_id=merchant_transaction_id,
            redirect_url=f"https://pay.example/{merchant_transaction_id}",
        )

    def check_status(self, merchant_transaction_id):
        self.checked.append(merchant_transaction_id)
        if not self.success:
            raise PaymentError("Payment not completed", code="PAYMENT_ERROR")
        return PaymentStatus(
            merchant_transaction_id=merchant_transaction_id,
            code="PAYMENT_SUCCESS",
            amount_paise=int(Decimal(str(self.paid_amount_inr)) * 100),
            transaction_id=f"T{merchant_transaction_id[-8:]}",
        )


def make_employee(db, points=0, role="user", email=None, bulk_buy_allowed=False, phone_number=None):
    employee = Employee(
        first_name="Test",
        last_name="Employee",
        email=email or f"emp_{uuid.uuid4().hex[:8]}@example.com",
        points=points,
        role=role,
        bulk_buy_allowed=bulk_buy_allowed,
        phone_number=phone_number,
    )
    db.add(employee)
    db.commit()
    db.refresh(employee)
    return employee


def make_product(db, base_price="120", stock=20, slabs=None, bulk_buy=False, is_active=True, colors=None):
    product = Product(
        name=f"Product {uuid.uuid4().hex[:6]}",
        sku=f"SKU-{uuid.uuid4().hex[:8].upper()}",
        base_price=Decimal(base_price),
        stock=stock,
        price_slabs=slabs or [],
        bulk_buy=bulk_buy,
        is_active=is_active,
        colors=colors or [],
    )
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


def make_campaign(db, products=(), cap=None, is_active=True, name="Diwali Gifts"):
    campaign = Campaign(name=name, max_products_per_user=cap, is_active=is_active)
    db.add(campaign)
    db.flush()
    for product in products:
        db.add(CampaignProduct(campaign_id=campaign.id, product_id=product.id))
    db.commit()
    db.refresh(campaign)
    return campaign


def add_cart_item(db, employee, product, quantity=1, campaign=None):
    item = CartItem(
        employee_id=employee.id,
        product_id=product.id,
        quantity=quantity,
        campaign_id=campaign.id if campaign else None,
    )
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


def set_branding(db, inr_per_point="1", max_selections=-1):
    branding = db.query(Branding).first()
    if branding is None:
        branding = Branding()
        db.add(branding)
    branding.inr_per_point = Decimal(inr_per_point)
    branding.max_selections_per_user = max_selections
    db.commit()
    return branding


def auth_header(employee):
    token = create_access_token({"sub": employee.id, "role": employee.role})
    return {"Authorization": f"Bearer {token}"}


def make_payment_intent(db, employee, merchant_transaction_id="TXN_1", copay_inr=200):
    intent = PaymentIntent(
        merchant_transaction_id=merchant_transaction_id,
        employee_id=employee.id,
        copay_inr=copay_inr,
    )
    db.add(intent)
    db.commit()
    return intent
