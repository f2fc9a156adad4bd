from enum import Enum


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"
    RIDER = "rider"


class ApprovalStatus(str, Enum):
    APPROVED = "approved"
    REMOVED = "removed"


class RiderStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class WorkStatus(str, Enum):
    AVAILABLE = "Available"
    IN_DELIVERY = "In Delivery"


class PaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PAID = "paid"


class DeliveryStatus(str, Enum):
    PARCEL_REQUEST_SENT = "Parcel_Request_Sent"  # created, awaiting payment
    PENDING_PICKUP = "pending-pickup"  # paid, awaiting rider
    ASSIGNED_RIDER = "Assigned_Rider"  # Admin ops
    RIDER_ARRIVING = "rider_arriving"  # Rider ops
    PARCEL_PICKED_UP = "parcel_picked_up"  # Rider ops
    DELIVERED = "delivered"  # Rider ops


# Order in which a parcel moves through its lifecycle
LIFECYCLE = [
    DeliveryStatus.PARCEL_REQUEST_SENT,
    DeliveryStatus.PENDING_PICKUP,
    DeliveryStatus.ASSIGNED_RIDER,
    DeliveryStatus.RIDER_ARRIVING,
    DeliveryStatus.PARCEL_PICKED_UP,
    DeliveryStatus.DELIVERED,
]

# Statuses the assigned rider may report
RIDER_STATUSES = [
    DeliveryStatus.RIDER_ARRIVING,
    DeliveryStatus.PARCEL_PICKED_UP,
    DeliveryStatus.DELIVERED,
]


def lifecycle_rank(delivery_status: str | None) -> int:
    """Position of a status in the lifecycle, -1 for unknown or missing."""
    for rank, step in enumerate(LIFECYCLE):
        if step.value == delivery_status:
            return rank
    return -1
