"""
Models Package

This file ensures all SQLAlchemy models are imported and registered,
which is required for relationships to work correctly.
"""

from models.base import Base
from models.category import Category
from models.item import Item, ItemSize
from models.add_on import AddOn, ItemAddOn, CategoryAddOn
from models.location import Location
from models.user import User
from models.address import Address
from models.offer import Offer
from models.order import Order
from models.orderItem import OrderItem, OrderItemAddOn
from models.payment_transaction import PaymentTransaction
from models.notification import Notification
from models.restaurant import RestaurantSettings, OperatingHours, Holiday

__all__ = [
    'Base',
    'Category',
    'Item',
    'ItemSize',
    'AddOn',
    'ItemAddOn',
    'CategoryAddOn',
    'Location',
    'User',
    'Address',
    'Offer',
    'Order',
    'OrderItem',
    'OrderItemAddOn',
    'PaymentTransaction',
    'Notification',
    'RestaurantSettings',
    'OperatingHours',
    'Holiday',
]
