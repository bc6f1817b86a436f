"""Central exports for lunch SQLAlchemy models."""

from .cart import Cart, CartItem
from .group import Group, GroupMember, GroupVisibility
from .order import Order, OrderItem, OrderStatus
from .payment import Payment, PaymentStatus
from .restaurant import MenuItem, Restaurant
from .user import User, UserRole
from .voting import DailyRestaurant, Vote, VotingPeriod

__all__ = [
    "Cart",
    "CartItem",
    "DailyRestaurant",
    "Group",
    "GroupMember",
    "GroupVisibility",
    "MenuItem",
    "Order",
    "OrderItem",
    "OrderStatus",
    "Payment",
    "PaymentStatus",
    "Restaurant",
    "User",
    "UserRole",
    "Vote",
    "VotingPeriod",
]
