"""
Dengue assistant service: guest throttle, short-term conversation memory, Groq completion.
"""
import json
import logging
from typing import Callable, Dict, List, Optional

import redis

from app.core.config import settings
from app.groq import GroqClient, GroqClientError, groq_client
from app.schema.assistant import AssistantMetadata, AssistantResponse
from app.session import GuestThrottle, get_redis_client

logger = logging.getLogger(__name__)

MEMORY_KEY_PREFIX = "chat:session:"

SYSTEM_PROMPT = (
    "You are DengueSpot AI, a friendly dengue prevention assistant inside the DengueSpot app. "
    "Answer questions about dengue symptoms, prevention, mosquito breeding sites and treatment "
    "in simple language, in short paragraphs, under 250 words. Politely redirect unrelated questions."
)

LOGIN_PROMPT = (
    "🔒 You've reached the free question limit! Please **log in** to continue chatting with "
    "DengueSpot AI. Logging in gives you unlimited questions and conversation memory. "
    "Click the **Login** button at the top to get started! 🦟"
)

FALLBACK_ANSWER = (
    "I can't reach my knowledge service right now. Meanwhile: empty standing water every week, "
    "cover water containers, use mosquito repellent, and see a doctor if you have high fever "
    "with body ache or rash. 🦟"
)


class AssistantService:
    def __init__(
        self,
        throttle: Optional[GuestThrottle] = None,
        client: Optional[GroqClient] = None,
        redis_factory: Callable[[], redis.Redis] = get_redis_client,
    ):
        self.throttle = throttle or GuestThrottle(
            limit=settings.GUEST_MESSAGE_LIMIT,
            window_seconds=settings.GUEST_WINDOW_SECONDS,
            client_factory=redis_factory,
        )
        self.client = client or groq_client
        self._redis_factory = redis_factory

    def reply(self, message: str, session_id: str, authenticated: bool) -> AssistantResponse:
        remaining = None
        if not authenticated:
            allowance = self.throttle.hit(session_id)
            if not allowance.allowed:
                logger.info("Guest session %s hit the free question limit", session_id)
                return AssistantResponse(
                    response=LOGIN_PROMPT,
                    metadata=AssistantMetadata(rate_limited=True, requires_login=True, remaining=0),
                )
            remaining = allowance.remaining

        memory = self.get_memory(session_id)
        conversation = [{"role": "system", "content": SYSTEM_PROMPT}, *memory, {"role": "user", "content": message}]

        fallback = False
        try:
            answer = self.client.complete(conversation)
        except GroqClientError as e:
            logger.warning("Assistant falling back: %s", e)
            answer = FALLBACK_ANSWER
            fallback = True

        if not fallback:
            self.save_memory(session_id, [*memory, {"role": "user", "content": message},
                                          {"role": "assistant", "content": answer}])

        return AssistantResponse(
            response=answer,
            metadata=AssistantMetadata(fallback=fallback, remaining=remaining),
        )

    def get_memory(self, session_id: str) -> List[Dict[str, str]]:
        try:
            data = self._redis_factory().get(f"{MEMORY_KEY_PREFIX}{session_id}")
        except redis.RedisError as e:
            logger.error("Memory read error: %s", e)
            return []
        return json.loads(data) if data else []

    def save_memory(self, session_id: str, messages: List[Dict[str, str]]) -> None:
        trimmed = messages[-settings.ASSISTANT_MEMORY_MESSAGES:]
        try:
            self._redis_factory().set(
                f"{MEMORY_KEY_PREFIX}{session_id}",
                json.dumps(trimmed),
                ex=settings.ASSISTANT_MEMORY_TTL,
            )
        except redis.RedisError as e:
            logger.error("Memory save error: %s", e)

    def clear_memory(self, session_id: str) -> None:
        try:
            self._redis_factory().delete(f"{MEMORY_KEY_PREFIX}{session_id}")
        except redis.RedisError as e:
            logger.error("Memory clear error: %s", e)
