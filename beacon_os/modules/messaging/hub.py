"""
Messaging hub - guest communication with AI-assisted automation
"""
from datetime import timedelta
from typing import TYPE_CHECKING, List, Optional
import logging

from beacon_os.config import Settings, settings as default_settings
from beacon_os.engine.event_bus import Event, EventBus, Unsubscribe, make_event
from beacon_os.engine.queue import QueueManager, QueuedJob
from beacon_os.models.entities import Property, Reservation
from beacon_os.models.events import EventType, MessagePayload
from beacon_os.modules.messaging.channels import LoggingChannel, MessageChannelRegistry
from beacon_os.modules.messaging.concierge import AIConcierge
from beacon_os.modules.messaging.templates import MessageTemplates
from beacon_os.modules.messaging.types import (
    ConciergeRequest,
    ConciergeResponse,
    LocalRecommendation,
    Message,
    MessageChannel,
    MessageSender,
    MessageTemplateType,
    RecommendationType,
)

if TYPE_CHECKING:
    from beacon_os.integrations.base import IPropertyIntegration

logger = logging.getLogger(__name__)

MESSAGING_QUEUE = "messaging"
REVIEW_REQUEST_JOB = "review_request"

DEFAULT_CHECK_IN_TIME = "4:00 PM"
DEFAULT_CHECK_OUT_TIME = "10:00 AM"


class MessagingHub:
    """
    Central hub for guest communication.

    Automated sends (confirmation, welcome, review, property ready,
    maintenance) are skipped when FEATURE_AUTOMATED_MESSAGING is off.
    """

    def __init__(
        self,
        event_bus: EventBus,
        integrations: "IPropertyIntegration",
        config: Optional[Settings] = None,
        queue: Optional[QueueManager] = None,
        concierge: Optional[AIConcierge] = None,
        templates: Optional[MessageTemplates] = None,
        channels: Optional[MessageChannelRegistry] = None,
    ):
        self._config = config or default_settings
        self._event_bus = event_bus
        self._integrations = integrations
        self._queue = queue
        self.concierge = concierge or AIConcierge(self._config)
        self.templates = templates or MessageTemplates()
        self.channels = channels or MessageChannelRegistry()
        self._subscriptions: List[Unsubscribe] = []
        self._initialized = False

    async def initialize(self) -> None:
        if self._initialized:
            return

        logger.info("Initializing messaging hub")

        for channel_type in (MessageChannel.EMAIL, MessageChannel.SMS):
            if self.channels.get_channel(channel_type) is None:
                self.channels.register(LoggingChannel(channel_type))

        self._subscriptions.append(
            self._event_bus.on(EventType.MESSAGE_RECEIVED, self._on_message_received)
        )
        if self._queue is not None:
            self._queue.register_worker(MESSAGING_QUEUE, self.process_job)

        self._initialized = True
        logger.info("Messaging hub initialized")

    async def shutdown(self) -> None:
        logger.info("Shutting down messaging hub")
        for unsubscribe in self._subscriptions:
            unsubscribe()
        self._subscriptions = []
        self._initialized = False

    async def health_check(self) -> bool:
        return self._initialized

    # ==================== Sending ====================

    async def send_message(
        self,
        recipient_id: str,
        content: str,
        channel: MessageChannel,
        subject: Optional[str] = None,
        property_id: Optional[str] = None,
        reservation_id: Optional[str] = None,
        sender: MessageSender = MessageSender.HOST,
        in_reply_to: Optional[str] = None,
    ) -> Message:
        """
        Deliver a message and publish message.sent.

        Channels without a registered provider (web, app) only record the
        message for in-app display.
        """
        message = Message(
            recipient_id=recipient_id,
            content=content,
            channel=channel,
            sender=sender,
            subject=subject,
            property_id=property_id,
            reservation_id=reservation_id,
        )

        provider = self.channels.get_channel(channel)
        if provider is not None:
            delivered = await provider.send(message)
            if not delivered:
                logger.warning(f"{channel.value} provider rejected message {message.id}")

        payload = MessagePayload(
            message_id=message.id,
            sender=sender.value,
            content=content,
            channel=channel.value,
            guest_id=recipient_id,
            property_id=property_id,
            reservation_id=reservation_id,
            in_reply_to=in_reply_to,
        )
        await self._event_bus.emit(
            EventType.MESSAGE_SENT,
            make_event(EventType.MESSAGE_SENT, payload, source="messaging-hub"),
        )
        return message

    async def send_reservation_confirmation(self, reservation_id: str) -> Optional[Message]:
        logger.info(f"Sending confirmation for reservation {reservation_id}")
        if not self._automation_enabled("reservation confirmation"):
            return None

        reservation, prop = await self._reservation_details(reservation_id)
        if reservation is None:
            return None

        template = self.templates.get(MessageTemplateType.BOOKING_CONFIRMATION)
        variables = {
            "guest_name": self._guest_name(reservation),
            "property_name": self._property_name(prop, reservation.property_id),
            "check_in": reservation.check_in.isoformat(),
            "check_out": reservation.check_out.isoformat(),
            "confirmation_code": reservation.confirmation_number,
            "total_amount": reservation.total_amount,
        }
        return await self.send_message(
            reservation.guest_id,
            self.templates.render(template, variables),
            MessageChannel.EMAIL,
            subject=f"Booking Confirmed - {variables['property_name']}",
            property_id=reservation.property_id,
            reservation_id=reservation_id,
        )

    async def send_welcome_message(self, reservation_id: str) -> List[Message]:
        """Welcome with WiFi and door code, by SMS and email"""
        logger.info(f"Sending welcome message for reservation {reservation_id}")
        if not self._automation_enabled("welcome message"):
            return []

        reservation, prop = await self._reservation_details(reservation_id)
        if reservation is None:
            return []

        template = self.templates.get(MessageTemplateType.WELCOME)
        property_name = self._property_name(prop, reservation.property_id)
        content = self.templates.render(template, {
            "guest_name": self._guest_name(reservation),
            "property_name": property_name,
            "wifi_network": (prop and prop.wifi_network) or "See welcome packet",
            "wifi_password": (prop and prop.wifi_password) or "See welcome packet",
            "door_code": (prop and prop.door_code) or "Sent separately",
            "check_out_time": DEFAULT_CHECK_OUT_TIME,
        })

        sent = []
        for channel in (MessageChannel.SMS, MessageChannel.EMAIL):
            sent.append(await self.send_message(
                reservation.guest_id,
                content,
                channel,
                subject=f"Welcome to {property_name}!" if channel == MessageChannel.EMAIL else None,
                property_id=reservation.property_id,
                reservation_id=reservation_id,
            ))
        return sent

    async def schedule_review_request(self, reservation_id: str) -> Optional[str]:
        """
        Queue the review request for REVIEW_REQUEST_DELAY_HOURS after checkout.

        Returns:
            Job id, or None without a queue
        """
        logger.info(f"Scheduling review request for reservation {reservation_id}")
        if self._queue is None:
            logger.warning("No job queue configured; review request not scheduled")
            return None
        return await self._queue.add(
            MESSAGING_QUEUE,
            REVIEW_REQUEST_JOB,
            {"reservation_id": reservation_id},
            delay=timedelta(hours=self._config.REVIEW_REQUEST_DELAY_HOURS),
        )

    async def send_review_request(self, reservation_id: str) -> Optional[Message]:
        if not self._automation_enabled("review request"):
            return None

        reservation, prop = await self._reservation_details(reservation_id)
        if reservation is None:
            return None

        template = self.templates.get(MessageTemplateType.REVIEW_REQUEST)
        variables = {
            "guest_name": self._guest_name(reservation),
            "property_name": self._property_name(prop, reservation.property_id),
            "review_link": f"https://surforsound.com/review/{reservation_id}",
        }
        return await self.send_message(
            reservation.guest_id,
            self.templates.render(template, variables),
            MessageChannel.EMAIL,
            subject=self.templates.render_subject(template, variables),
            property_id=reservation.property_id,
            reservation_id=reservation_id,
        )

    async def process_job(self, job: QueuedJob) -> None:
        """Worker for the messaging queue"""
        if job.name == REVIEW_REQUEST_JOB:
            await self.send_review_request(job.data["reservation_id"])
        else:
            logger.warning(f"Unknown messaging job: {job.name}")

    async def send_property_ready_notification(self, property_id: str) -> Optional[Message]:
        """Tell the next arriving guest the property is ready"""
        logger.info(f"Property {property_id} is ready for guests")
        if not self._automation_enabled("property ready notification"):
            return None

        reservation = await self._integrations.get_upcoming_reservation(property_id)
        if reservation is None:
            logger.info(f"No upcoming reservation for property {property_id}")
            return None
        prop = await self._integrations.get_property(property_id)

        template = self.templates.get(MessageTemplateType.PROPERTY_READY)
        content = self.templates.render(template, {
            "guest_name": self._guest_name(reservation),
            "property_name": self._property_name(prop, property_id),
            "check_in_time": DEFAULT_CHECK_IN_TIME,
            "door_code": (prop and prop.door_code) or "Sent separately",
        })
        return await self.send_message(
            reservation.guest_id,
            content,
            MessageChannel.SMS,
            property_id=property_id,
            reservation_id=reservation.id,
        )

    async def send_maintenance_notification(self, property_id: str, issue: str) -> Optional[Message]:
        """Tell the in-house guest about a maintenance visit"""
        logger.info(f"Sending maintenance notification for property {property_id}")
        if not self._automation_enabled("maintenance notification"):
            return None

        reservation = await self._integrations.get_current_reservation(property_id)
        if reservation is None:
            logger.info(f"No guest in house at property {property_id}")
            return None
        prop = await self._integrations.get_property(property_id)

        template = self.templates.get(MessageTemplateType.MAINTENANCE_NOTIFICATION)
        content = self.templates.render(template, {
            "guest_name": self._guest_name(reservation),
            "property_name": self._property_name(prop, property_id),
            "issue": issue,
            "eta": "within the hour",
        })
        return await self.send_message(
            reservation.guest_id,
            content,
            MessageChannel.SMS,
            property_id=property_id,
            reservation_id=reservation.id,
        )

    # ==================== Concierge ====================

    async def process_with_concierge(self, request: ConciergeRequest) -> ConciergeResponse:
        return await self.concierge.process(request)

    async def get_local_recommendations(
        self,
        location: str,
        rec_type: RecommendationType = RecommendationType.RESTAURANT,
    ) -> List[LocalRecommendation]:
        return await self.concierge.get_recommendations(location, rec_type)

    async def _on_message_received(self, event: Event) -> None:
        message = event.payload
        if not isinstance(message, MessagePayload):
            return
        if not self._config.FEATURE_AI_CONCIERGE or message.sender != MessageSender.GUEST.value:
            return

        response = await self.process_with_concierge(ConciergeRequest(
            message=message.content,
            guest_id=message.guest_id,
            property_id=message.property_id,
            reservation_id=message.reservation_id,
        ))

        if response.escalate:
            logger.warning(
                f"Message {message.message_id} escalated to staff: {response.escalate_reason}"
            )
            return

        try:
            channel = MessageChannel(message.channel)
        except ValueError:
            channel = MessageChannel.WEB

        reply = await self.send_message(
            message.guest_id or "",
            response.response,
            channel,
            property_id=message.property_id,
            reservation_id=message.reservation_id,
            sender=MessageSender.AI,
            in_reply_to=message.message_id,
        )

        payload = MessagePayload(
            message_id=reply.id,
            sender=MessageSender.AI.value,
            content=response.response,
            channel=channel.value,
            guest_id=message.guest_id,
            property_id=message.property_id,
            reservation_id=message.reservation_id,
            in_reply_to=message.message_id,
        )
        await self._event_bus.emit(
            EventType.MESSAGE_AI_RESPONSE,
            make_event(
                EventType.MESSAGE_AI_RESPONSE,
                payload,
                source="messaging-hub",
                correlation_id=event.event_id,
            ),
        )

    # ==================== Helpers ====================

    def _automation_enabled(self, what: str) -> bool:
        if self._config.FEATURE_AUTOMATED_MESSAGING:
            return True
        logger.info(f"Automated messaging disabled; skipping {what}")
        return False

    async def _reservation_details(self, reservation_id: str):
        reservation = await self._integrations.get_reservation(reservation_id)
        if reservation is None:
            logger.warning(f"Reservation {reservation_id} not found; nothing sent")
            return None, None
        prop = await self._integrations.get_property(reservation.property_id)
        return reservation, prop

    @staticmethod
    def _guest_name(reservation: Reservation) -> str:
        if reservation.guest is not None and reservation.guest.first_name:
            return reservation.guest.first_name
        return "there"

    @staticmethod
    def _property_name(prop: Optional[Property], property_id: str) -> str:
        if prop is not None and prop.name:
            return prop.name
        return property_id
