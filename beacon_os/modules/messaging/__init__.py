from beacon_os.modules.messaging.channels import IMessageChannel, LoggingChannel, MessageChannelRegistry
from beacon_os.modules.messaging.concierge import AIConcierge
from beacon_os.modules.messaging.hub import MessagingHub
from beacon_os.modules.messaging.templates import MessageTemplates
from beacon_os.modules.messaging.types import (
    ConciergeRequest,
    ConciergeResponse,
    LocalRecommendation,
    Message,
    MessageChannel,
    MessageSender,
    MessageTemplate,
    MessageTemplateType,
    RecommendationType,
)

__all__ = [
    "IMessageChannel",
    "LoggingChannel",
    "MessageChannelRegistry",
    "AIConcierge",
    "MessagingHub",
    "MessageTemplates",
    "ConciergeRequest",
    "ConciergeResponse",
    "LocalRecommendation",
    "Message",
    "MessageChannel",
    "MessageSender",
    "MessageTemplate",
    "MessageTemplateType",
    "RecommendationType",
]
