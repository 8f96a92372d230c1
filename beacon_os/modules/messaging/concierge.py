"""
AI concierge

Answers guest questions through an OpenAI-compatible chat model, with
keyword replies when the model is disabled or failing. Emergencies skip
the model and escalate at once.
"""
from typing import Dict, List, Optional
import logging
import uuid

from openai import AsyncOpenAI

from beacon_os.config import Settings, settings as default_settings
from beacon_os.modules.messaging.types import (
    ConciergeRequest,
    ConciergeResponse,
    LocalRecommendation,
    RecommendationType,
)
from beacon_os.store import IKeyValueStore, TTLStore

logger = logging.getLogger(__name__)

ChatMessage = Dict[str, str]

PERSONA = """You are Sandy, a concierge for Surf or Sound Realty on Hatteras Island. \
You have lived on the Outer Banks for 15 years and love helping guests have a great vacation.

Speak casually and warmly, like a real person. Keep answers short unless asked for detail, \
and ask a follow-up question when it helps you understand what the guest needs.

You know all seven villages: Rodanthe, Waves, Salvo, Avon, Buxton, Frisco and Hatteras Village. \
You know the local restaurants, beaches, fishing charters, surf spots and seasonal events.

When a guest has a problem, lead with empathy, take ownership and be specific about next steps. \
Never describe yourself as an AI and never be pushy or salesy."""

EMERGENCY_KEYWORDS = (
    "emergency", "fire", "flood", "injury", "hurt badly",
    "ambulance", "police", "911", "medical emergency",
    "accident", "danger", "break-in", "intruder", "gas leak",
    "can't breathe", "heart attack", "stroke",
)

ESCALATION_KEYWORDS = (
    "refund", "compensation", "manager", "lawyer", "sue",
    "horrible", "disgusting", "unacceptable", "worst",
    "health department", "report", "complaint",
)

FALLBACK_REPLIES = (
    (("wifi", "internet", "password"),
     "The WiFi info should be in your welcome packet, usually on the kitchen counter or by the "
     "front door. If you can't find it, tell me which property you're at and I'll look it up!"),
    (("check in", "check-in", "arrive", "arrival"),
     "Check-in is at 4 PM, but if your place is ready earlier we'll let you know! Feel free to "
     "explore the island while you wait."),
    (("check out", "check-out", "leaving", "departure"),
     "Check-out is at 10 AM. Just load the dishwasher, take out the trash and leave the keys on "
     "the counter. Safe travels! Where are you headed next?"),
    (("restaurant", "food", "eat", "dinner", "lunch", "breakfast"),
     "Oh, I love talking about food! What are you in the mood for? We've got great seafood spots, "
     "casual beach bars and some really nice dinner places."),
    (("beach", "swim", "ocean"),
     "The beaches here are incredible! Always swim where you see other people and watch for rip "
     "currents. Are you looking for a quieter spot or somewhere with more amenities?"),
    (("weather", "rain", "storm"),
     "Weather on the island changes quickly, and rain usually passes fast. If you're stuck inside, "
     "the Graveyard of the Atlantic Museum in Hatteras Village is really cool."),
    (("fish", "fishing", "charter"),
     "You picked a great spot for fishing! Inshore or offshore? Avon Pier is great for pier "
     "fishing, and I can point you to the right charter captain."),
    (("surf", "waves", "board"),
     "The surfing here is fantastic! Buxton has some of the best breaks, especially at Cape Point. "
     "What's your experience level?"),
    (("lighthouse", "cape hatteras"),
     "The Cape Hatteras Lighthouse is a must-see! You can climb it in season, 257 steps, and the "
     "view is worth it. Go in the morning before it gets too hot."),
    (("thank", "thanks", "appreciate"),
     "You're so welcome! Enjoy your time on the island and reach out if you need anything else!"),
    (("problem", "issue", "broken", "not working"),
     "Oh no, I'm sorry you're dealing with that. Can you tell me a bit more about what's going on? "
     "I want to get this sorted out for you as quickly as possible."),
)

GENERIC_REPLY = (
    "Hey! Thanks for reaching out. I'm happy to help with anything you need, whether it's "
    "restaurant recommendations, activity ideas or something about your property. "
    "What can I help you with?"
)

EMERGENCY_REPLY = (
    "I can see this is urgent. For any emergency, please call 911 immediately. I'm also alerting "
    "our on-call team right now and someone will call you within the next few minutes. "
    "Are you and everyone with you safe right now?"
)


def _rec(name, rec_type, description, distance, rating, note, price_level=None) -> LocalRecommendation:
    return LocalRecommendation(
        name=name,
        type=rec_type,
        description=description,
        distance=distance,
        rating=rating,
        price_level=price_level,
        note=note,
    )


RECOMMENDATIONS: Dict[RecommendationType, List[LocalRecommendation]] = {
    RecommendationType.RESTAURANT: [
        _rec("Orange Blossom Cafe", RecommendationType.RESTAURANT,
             "Home of the famous Apple Ugly. Get there early, the line gets long.",
             "Buxton", 4.8, "My favorite breakfast spot.", price_level=2),
        _rec("Owens' Restaurant", RecommendationType.RESTAURANT,
             "Classic OBX fine dining since 1946. The she-crab soup is legendary.",
             "Nags Head", 4.7, "Perfect for a special occasion dinner.", price_level=3),
        _rec("Breakwater Restaurant", RecommendationType.RESTAURANT,
             "On the harbor in Hatteras Village with sunset views and fresh seafood.",
             "Hatteras Village", 4.6, "Ask for a table on the deck.", price_level=3),
        _rec("Diamond Shoals Restaurant", RecommendationType.RESTAURANT,
             "Family spot with huge portions and fried seafood platters.",
             "Buxton", 4.5, "Best place for feeding hungry teenagers.", price_level=2),
    ],
    RecommendationType.ACTIVITY: [
        _rec("Cape Hatteras Lighthouse Climb", RecommendationType.ACTIVITY,
             "257 steps to the top of the tallest brick lighthouse in North America.",
             "Buxton", 4.9, "Go early morning or late afternoon to avoid the heat."),
        _rec("Kiteboarding Lesson", RecommendationType.ACTIVITY,
             "The sound side is one of the best beginner kiteboarding spots anywhere.",
             "Various", 4.8, "REAL Watersports in Waves has excellent instructors."),
        _rec("Offshore Fishing Charter", RecommendationType.ACTIVITY,
             "Marlin, tuna and mahi-mahi; full and half-day trips.",
             "Hatteras Village", 4.9, "Tell Captain Marty at Teach's Lair that Sandy sent you."),
        _rec("Kayak Eco Tour", RecommendationType.ACTIVITY,
             "Paddle the marshes and see herons, egrets and maybe dolphins.",
             "Salvo", 4.7, "Sunset tours are magical. Bring bug spray."),
    ],
    RecommendationType.ATTRACTION: [
        _rec("Graveyard of the Atlantic Museum", RecommendationType.ATTRACTION,
             "Free museum about shipwrecks and maritime history.",
             "Hatteras Village", 4.7, "Kids love the hands-on exhibits."),
        _rec("Pea Island Wildlife Refuge", RecommendationType.ATTRACTION,
             "13 miles of beaches and over 400 recorded bird species.",
             "Pea Island", 4.8, "The North Pond trail is an easy walk."),
        _rec("Cape Point", RecommendationType.ATTRACTION,
             "Where the Labrador Current meets the Gulf Stream.",
             "Buxton", 4.6, "The sunrise here is unforgettable."),
        _rec("Ocracoke Island Day Trip", RecommendationType.ATTRACTION,
             "Free ferry from Hatteras Village to a charming island village.",
             "Hatteras Village ferry", 4.8, "Dolphins often follow the boat."),
    ],
}


def is_emergency(message: str) -> bool:
    lowered = message.lower()
    return any(keyword in lowered for keyword in EMERGENCY_KEYWORDS)


def needs_escalation(message: str) -> bool:
    lowered = message.lower()
    return any(keyword in lowered for keyword in ESCALATION_KEYWORDS)


class AIConcierge:
    """
    Guest-facing concierge.

    Conversations are kept per guest (or reservation) in an injected store
    and expire after CONVERSATION_TTL_SECONDS of inactivity.
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        store: Optional[IKeyValueStore[List[ChatMessage]]] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        self._config = config or default_settings
        self._conversations = store if store is not None else TTLStore(
            default_ttl=self._config.CONVERSATION_TTL_SECONDS
        )
        if client is not None:
            self._client = client
        elif self._config.llm_enabled:
            self._client = AsyncOpenAI(
                api_key=self._config.OPENAI_API_KEY,
                base_url=self._config.OPENAI_BASE_URL,
                timeout=30.0,
            )
        else:
            self._client = None

    def is_enabled(self) -> bool:
        """Whether replies come from the model"""
        return self._client is not None

    async def process(self, request: ConciergeRequest) -> ConciergeResponse:
        """
        Answer a guest message.

        Emergencies are escalated without calling the model; the message is
        still recorded in the conversation.
        """
        key = request.guest_id or request.reservation_id or f"anon-{uuid.uuid4().hex}"
        messages = list(self._conversations.get(key) or [])

        if not messages:
            messages.append({"role": "system", "content": PERSONA + self._property_context(request)})
            for entry in request.conversation_history:
                messages.append({"role": entry["role"], "content": entry["content"]})

        messages.append({"role": "user", "content": request.message})

        if is_emergency(request.message):
            logger.warning(f"Emergency reported in conversation {key}")
            self._conversations.set(key, messages)
            return ConciergeResponse(
                response=EMERGENCY_REPLY,
                confidence=100,
                escalate=True,
                escalate_reason="EMERGENCY: Immediate human response required",
                suggested_actions=["Call 911", "Alert on-call manager", "Follow up immediately"],
            )

        response = await self._respond(messages)
        messages.append({"role": "assistant", "content": response.response})
        self._conversations.set(key, messages)
        return response

    async def _respond(self, messages: List[ChatMessage]) -> ConciergeResponse:
        if self._client is None:
            return self.fallback_response(messages)

        try:
            completion = await self._client.chat.completions.create(
                model=self._config.LLM_MODEL,
                messages=messages,
                temperature=self._config.LLM_TEMPERATURE,
                max_tokens=self._config.LLM_MAX_TOKENS,
                presence_penalty=0.6,
                frequency_penalty=0.3,
            )
            content = completion.choices[0].message.content or ""
        except Exception as e:
            logger.error(f"Concierge model call failed: {e}", exc_info=True)
            return self.fallback_response(messages)

        last_user = self._last_user_message(messages)
        escalate = needs_escalation(last_user)
        return ConciergeResponse(
            response=content,
            confidence=90,
            escalate=escalate,
            escalate_reason="Complex issue requiring human follow-up" if escalate else None,
        )

    def fallback_response(self, messages: List[ChatMessage]) -> ConciergeResponse:
        """Keyword reply used when the model is unavailable"""
        last_user = self._last_user_message(messages).lower()

        for triggers, reply in FALLBACK_REPLIES:
            if any(t in last_user for t in triggers):
                reported = "problem" in last_user or "issue" in last_user
                escalate = reported or needs_escalation(last_user)
                return ConciergeResponse(
                    response=reply,
                    confidence=75,
                    escalate=escalate,
                    escalate_reason="Potential issue reported" if escalate else None,
                )

        if needs_escalation(last_user):
            return ConciergeResponse(
                response=GENERIC_REPLY,
                confidence=60,
                escalate=True,
                escalate_reason="Complex issue requiring human follow-up",
            )
        return ConciergeResponse(response=GENERIC_REPLY, confidence=60)

    async def get_recommendations(
        self,
        location: str,
        rec_type: RecommendationType = RecommendationType.RESTAURANT,
    ) -> List[LocalRecommendation]:
        """Curated picks; types without a list fall back to restaurants"""
        try:
            key = RecommendationType(rec_type)
        except ValueError:
            key = RecommendationType.RESTAURANT
        picks = RECOMMENDATIONS.get(key) or RECOMMENDATIONS[RecommendationType.RESTAURANT]
        logger.debug(f"Returning {len(picks)} {key.value} picks near {location}")
        return list(picks)

    def get_conversation(self, key: str) -> List[ChatMessage]:
        return list(self._conversations.get(key) or [])

    def clear_conversation(self, key: str) -> None:
        self._conversations.delete(key)

    @staticmethod
    def _last_user_message(messages: List[ChatMessage]) -> str:
        for message in reversed(messages):
            if message["role"] == "user":
                return message["content"]
        return ""

    @staticmethod
    def _property_context(request: ConciergeRequest) -> str:
        if not request.property_id:
            return "\n\nThe guest has not specified a property yet; they may be browsing or planning."
        return (
            "\n\nCURRENT GUEST CONTEXT:\n"
            f"- Staying at property ID: {request.property_id}\n"
            f"- Reservation ID: {request.reservation_id or 'Not yet booked'}\n"
            "- Help them with anything related to their stay or the area"
        )
