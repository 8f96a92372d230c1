"""
Messaging types
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional
import uuid


class MessageChannel(str, Enum):
    """Delivery channel"""
    EMAIL = "email"
    SMS = "sms"
    WEB = "web"
    APP = "app"
    AIRBNB = "airbnb"
    VRBO = "vrbo"


class MessageSender(str, Enum):
    GUEST = "guest"
    HOST = "host"
    AI = "ai"
    SYSTEM = "system"


class MessageTemplateType(str, Enum):
    """Template type"""
    BOOKING_CONFIRMATION = "booking_confirmation"
    CHECK_IN_INSTRUCTIONS = "check_in_instructions"
    WELCOME = "welcome"
    CHECKOUT_REMINDER = "checkout_reminder"
    REVIEW_REQUEST = "review_request"
    PROPERTY_READY = "property_ready"
    MAINTENANCE_NOTIFICATION = "maintenance_notification"
    PAYMENT_REMINDER = "payment_reminder"
    CUSTOM = "custom"


class RecommendationType(str, Enum):
    RESTAURANT = "restaurant"
    ACTIVITY = "activity"
    ATTRACTION = "attraction"
    SHOPPING = "shopping"
    SERVICE = "service"


@dataclass
class Message:
    """An outbound or inbound guest message"""
    recipient_id: str
    content: str
    channel: MessageChannel
    sender: MessageSender = MessageSender.HOST
    subject: Optional[str] = None
    property_id: Optional[str] = None
    reservation_id: Optional[str] = None
    conversation_id: str = ""
    read: bool = False
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class MessageTemplate:
    """
    Message template.

    Placeholders are written {{name}}; `variables` lists the ones the
    template expects.
    """
    id: str
    name: str
    type: MessageTemplateType
    content: str
    variables: List[str] = field(default_factory=list)
    channels: List[MessageChannel] = field(default_factory=list)
    subject: Optional[str] = None


@dataclass
class ConciergeRequest:
    """Guest question for the concierge"""
    message: str
    guest_id: Optional[str] = None
    property_id: Optional[str] = None
    reservation_id: Optional[str] = None
    conversation_history: List[Dict[str, str]] = field(default_factory=list)


@dataclass
class ConciergeResponse:
    """
    Concierge answer.

    Attributes:
        response: Reply text
        confidence: 0-100
        escalate: Whether a human must follow up
        escalate_reason: Why, when escalating
        suggested_actions: Follow-up actions for staff
    """
    response: str
    confidence: int
    escalate: bool = False
    escalate_reason: Optional[str] = None
    suggested_actions: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class LocalRecommendation:
    """A curated local spot"""
    name: str
    type: RecommendationType
    description: str
    distance: Optional[str] = None
    rating: Optional[float] = None
    price_level: Optional[int] = None
    website: Optional[str] = None
    phone: Optional[str] = None
    note: Optional[str] = None
