"""Enumerations shared by the domain models and API schemas."""

from enum import Enum


class UserRole(str, Enum):
    USER = "User"
    ADMIN = "Admin"


class DeliveryStatus(str, Enum):
    """Fulfilment progress of a product request, in lifecycle order."""

    OPENING = "Opening"
    PENDING = "Pending"
    PURCHASED = "Purchased"
    PICKED_UP = "PickedUp"
    OUT_FOR_DELIVERY = "OutForDelivery"
    DELIVERED = "Delivered"
    CANCEL = "Cancel"
    REFUNDED = "Refunded"


class Category(str, Enum):
    ELECTRONICS = "Electronics"
    COSMETICS = "Cosmetics"
    FOOD = "Food"
    STATIONERY = "Stationery"
    CLOTHING = "Clothing"
    TOYS = "Toys"
    ACCESSORIES = "Accessories"
    OTHERS = "Others"
