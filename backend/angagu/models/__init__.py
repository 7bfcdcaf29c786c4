# Models package init: importing every model registers it with Base.metadata
from angagu.models.company import Admin, Company
from angagu.models.customer import Address, Customer
from angagu.models.order import Order, OrderDetail, Review
from angagu.models.product import Board, Product, ProductImage
from angagu.models.verification import SmsVerification

__all__ = [
    "Address",
    "Admin",
    "Board",
    "Company",
    "Customer",
    "Order",
    "OrderDetail",
    "Product",
    "ProductImage",
    "Review",
    "SmsVerification",
]
