"""
Message templates for common guest communications
"""
from typing import Dict, List, Mapping, Optional, Union
import re

from beacon_os.errors import NotFoundError
from beacon_os.modules.messaging.types import MessageChannel, MessageTemplate, MessageTemplateType

_PLACEHOLDER = re.compile(r"\{\{\s*(\w+)\s*\}\}")

SUPPORT_PHONE = "(252) 555-0123"


def _default_templates() -> List[MessageTemplate]:
    return [
        MessageTemplate(
            id="booking_confirmation",
            name="Booking Confirmation",
            type=MessageTemplateType.BOOKING_CONFIRMATION,
            subject="Your Reservation is Confirmed - {{property_name}}",
            content=(
                "Hi {{guest_name}},\n\n"
                "Great news! Your reservation at {{property_name}} is confirmed.\n\n"
                "RESERVATION DETAILS\n"
                "Confirmation Code: {{confirmation_code}}\n"
                "Check-in: {{check_in}} at 4:00 PM\n"
                "Check-out: {{check_out}} at 10:00 AM\n"
                "Total: ${{total_amount}}\n\n"
                "WHAT'S NEXT\n"
                "- 7 days before arrival: we'll send your check-in instructions\n"
                "- Day of arrival: you'll receive door codes and WiFi info\n"
                "- During your stay: our concierge is available 24/7\n\n"
                "We can't wait to host you at Surf or Sound!\n\n"
                "Best regards,\n"
                "The Surf or Sound Team\n"
                f"{SUPPORT_PHONE}"
            ),
            variables=["guest_name", "property_name", "confirmation_code", "check_in", "check_out", "total_amount"],
            channels=[MessageChannel.EMAIL],
        ),
        MessageTemplate(
            id="check_in_instructions",
            name="Check-in Instructions",
            type=MessageTemplateType.CHECK_IN_INSTRUCTIONS,
            subject="Your Check-in Instructions for {{property_name}}",
            content=(
                "Hi {{guest_name}},\n\n"
                "Your beach vacation starts tomorrow! Here's everything you need to know.\n\n"
                "Property: {{property_name}}\n"
                "Address: {{address}}\n"
                "Check-in Time: {{check_in_time}}\n\n"
                "Door Code: {{door_code}}\n"
                "Lockbox Location: {{lockbox_location}}\n\n"
                "WiFi: {{wifi_network}} / {{wifi_password}}\n\n"
                "Parking: {{parking_instructions}}\n\n"
                f"24/7 Support: {SUPPORT_PHONE}\n\n"
                "Safe travels and enjoy your stay!\n"
                "The Surf or Sound Team"
            ),
            variables=[
                "guest_name", "property_name", "address", "check_in_time", "door_code",
                "lockbox_location", "wifi_network", "wifi_password", "parking_instructions",
            ],
            channels=[MessageChannel.EMAIL, MessageChannel.SMS],
        ),
        MessageTemplate(
            id="welcome",
            name="Welcome Message",
            type=MessageTemplateType.WELCOME,
            subject="Welcome to {{property_name}}!",
            content=(
                "Welcome to {{property_name}}, {{guest_name}}!\n\n"
                "WiFi: {{wifi_network}} / {{wifi_password}}\n"
                "Door: {{door_code}}\n"
                "Check-out: {{check_out_time}}\n\n"
                f"Need anything? Text us at {SUPPORT_PHONE} or chat with our AI concierge!\n\n"
                "Enjoy your stay!"
            ),
            variables=["guest_name", "property_name", "wifi_network", "wifi_password", "door_code", "check_out_time"],
            channels=[MessageChannel.SMS, MessageChannel.EMAIL],
        ),
        MessageTemplate(
            id="checkout_reminder",
            name="Checkout Reminder",
            type=MessageTemplateType.CHECKOUT_REMINDER,
            subject="Checkout Reminder - {{property_name}}",
            content=(
                "Hi {{guest_name}},\n\n"
                "We hope you've had an amazing stay at {{property_name}}!\n\n"
                "- Checkout time: {{check_out_time}}\n"
                "- Please load and run the dishwasher\n"
                "- Place all trash in outdoor bins\n"
                "- Leave keys on the kitchen counter\n"
                "- Lock all doors and windows\n\n"
                "Safe travels,\n"
                "The Surf or Sound Team"
            ),
            variables=["guest_name", "property_name", "check_out_time"],
            channels=[MessageChannel.EMAIL, MessageChannel.SMS],
        ),
        MessageTemplate(
            id="review_request",
            name="Review Request",
            type=MessageTemplateType.REVIEW_REQUEST,
            subject="How was your stay at {{property_name}}?",
            content=(
                "Hi {{guest_name}},\n\n"
                "We hope you had a wonderful time at {{property_name}}!\n\n"
                "Would you take a moment to share your experience?\n\n"
                "Leave a Review: {{review_link}}\n\n"
                "As a thank you, you'll receive a 10% discount on your next stay!\n\n"
                "Warmly,\n"
                "The Surf or Sound Team"
            ),
            variables=["guest_name", "property_name", "review_link"],
            channels=[MessageChannel.EMAIL],
        ),
        MessageTemplate(
            id="property_ready",
            name="Property Ready",
            type=MessageTemplateType.PROPERTY_READY,
            subject="Great news! {{property_name}} is ready for you",
            content=(
                "Hi {{guest_name}},\n\n"
                "{{property_name}} is all cleaned and ready for your arrival!\n\n"
                "Check-in at {{check_in_time}}\n"
                "Door code: {{door_code}}\n\n"
                "Text us when you arrive - we're here to help!\n\n"
                "The Surf or Sound Team"
            ),
            variables=["guest_name", "property_name", "check_in_time", "door_code"],
            channels=[MessageChannel.SMS],
        ),
        MessageTemplate(
            id="maintenance_notification",
            name="Maintenance Notification",
            type=MessageTemplateType.MAINTENANCE_NOTIFICATION,
            subject="Update on {{issue}} at {{property_name}}",
            content=(
                "Hi {{guest_name}},\n\n"
                "We were notified about {{issue}} at {{property_name}}.\n\n"
                "A member of our team will be there {{eta}} to resolve this.\n\n"
                "We apologize for any inconvenience and appreciate your patience!\n\n"
                f"If you have questions, call us at {SUPPORT_PHONE}.\n\n"
                "The Surf or Sound Team"
            ),
            variables=["guest_name", "property_name", "issue", "eta"],
            channels=[MessageChannel.SMS, MessageChannel.EMAIL],
        ),
        MessageTemplate(
            id="payment_reminder",
            name="Payment Reminder",
            type=MessageTemplateType.PAYMENT_REMINDER,
            subject="Payment Reminder for {{property_name}}",
            content=(
                "Hi {{guest_name}},\n\n"
                "This is a friendly reminder that your remaining balance of ${{balance_amount}} "
                "for {{property_name}} is due on {{due_date}}.\n\n"
                "Pay securely here: {{payment_link}}\n\n"
                "If you've already made this payment, please disregard this message.\n\n"
                "Thanks!\n"
                "The Surf or Sound Team"
            ),
            variables=["guest_name", "property_name", "balance_amount", "due_date", "payment_link"],
            channels=[MessageChannel.EMAIL],
        ),
    ]


class MessageTemplates:
    """Template registry"""

    def __init__(self, templates: Optional[List[MessageTemplate]] = None):
        self._templates: Dict[MessageTemplateType, MessageTemplate] = {}
        for template in templates if templates is not None else _default_templates():
            self.register(template)

    def register(self, template: MessageTemplate) -> None:
        self._templates[template.type] = template

    def get(self, template_type: Union[MessageTemplateType, str]) -> MessageTemplate:
        """
        Raises:
            NotFoundError: no template of that type
        """
        try:
            key = MessageTemplateType(template_type)
        except ValueError:
            raise NotFoundError("Template", str(template_type))
        template = self._templates.get(key)
        if template is None:
            raise NotFoundError("Template", key.value)
        return template

    def list_types(self) -> List[MessageTemplateType]:
        return list(self._templates)

    @staticmethod
    def render_text(text: str, variables: Mapping[str, object]) -> str:
        """Replace {{name}} placeholders; unknown placeholders are left as is"""
        def substitute(match: "re.Match") -> str:
            name = match.group(1)
            if name in variables:
                return str(variables[name])
            return match.group(0)

        return _PLACEHOLDER.sub(substitute, text)

    def render(self, template: MessageTemplate, variables: Mapping[str, object]) -> str:
        return self.render_text(template.content, variables)

    def render_subject(self, template: MessageTemplate, variables: Mapping[str, object]) -> Optional[str]:
        if template.subject is None:
            return None
        return self.render_text(template.subject, variables)
