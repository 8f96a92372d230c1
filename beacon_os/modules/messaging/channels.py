"""
Message delivery channels

Delivery providers (email, SMS, OTA inboxes) implement IMessageChannel and
are registered on the hub's MessageChannelRegistry.
"""
from abc import ABC, abstractmethod
from typing import Dict, List, Optional
import logging

from beacon_os.modules.messaging.types import Message, MessageChannel

logger = logging.getLogger(__name__)


class IMessageChannel(ABC):
    """Delivery channel interface"""

    @abstractmethod
    async def send(self, message: Message) -> bool:
        """Deliver a message

        Args:
            message: Message carrying recipient, subject and content

        Returns:
            Whether the provider accepted it
        """

    @abstractmethod
    def get_channel_type(self) -> MessageChannel:
        """Channel this implementation delivers on"""


class LoggingChannel(IMessageChannel):
    """Logs deliveries and keeps them in memory (development default)"""

    def __init__(self, channel_type: MessageChannel):
        self._channel_type = channel_type
        self.sent: List[Message] = []

    async def send(self, message: Message) -> bool:
        if message.subject:
            logger.info(
                f"{self._channel_type.value} to {message.recipient_id}: {message.subject}"
            )
        else:
            logger.info(f"{self._channel_type.value} to {message.recipient_id}")
        self.sent.append(message)
        return True

    def get_channel_type(self) -> MessageChannel:
        return self._channel_type


class MessageChannelRegistry:
    """Channel type -> implementation"""

    def __init__(self):
        self._channels: Dict[MessageChannel, IMessageChannel] = {}

    def register(self, channel: IMessageChannel) -> None:
        self._channels[channel.get_channel_type()] = channel

    def get_channel(self, channel_type: MessageChannel) -> Optional[IMessageChannel]:
        return self._channels.get(channel_type)

    def get_all_channels(self) -> List[IMessageChannel]:
        return list(self._channels.values())
