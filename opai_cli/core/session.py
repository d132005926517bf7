"""Conversation state for a chat with a single endpoint."""

from __future__ import annotations

import logging
from typing import List, Optional

from .client import OpenAIClientWrapper
from .errors import CredentialNotFound
from .service_config import EndpointCredential
from .types import (
    ChatResponse,
    Choice,
    GenerationConfig,
    Message,
    Role,
    UsageTotals,
    build_request_body,
)

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = "You are friendly assistant"


class Session:
    """Message history, generation settings and token usage for one conversation.

    The endpoint keeps no state between calls, so every turn sends the whole
    transcript. Turns are expected one at a time; nothing here is locked.
    """

    def __init__(
        self,
        credential: EndpointCredential,
        system_prompt: str,
        config: GenerationConfig,
        client: Optional[OpenAIClientWrapper] = None,
    ) -> None:
        if not credential.is_complete:
            raise CredentialNotFound(
                "Endpoint is unresolved: both api_key and chat_url are required"
            )
        self.credential = credential
        self.config = config
        self.client = client or OpenAIClientWrapper.for_credential(credential)
        self.messages: List[Message] = [Message(Role.SYSTEM, system_prompt)]
        self.usage = UsageTotals()
        self.last_model: Optional[str] = None
        self.last_created: Optional[int] = None

    @property
    def system_prompt(self) -> str:
        return self.messages[0].content

    def _add_message(self, role: Role, content: str) -> None:
        self.messages.append(Message(role, content))

    def add_user_message(self, content: str) -> None:
        self._add_message(Role.USER, content)

    def submit_turn(self, user_text: str) -> List[Choice]:
        """Send *user_text* with the full history and return the reply choices.

        The user message is recorded before the request goes out, so it stays
        in the history even when the call fails. On failure nothing else
        changes and the error propagates: :class:`EndpointRejected` for a
        non-2xx status, :class:`TransportFailure` otherwise.
        """
        self.add_user_message(user_text)
        body = build_request_body(self.config, self.messages)
        logger.debug(
            "POST %s model=%s messages=%d",
            self.credential.endpoint_url,
            self.config.model,
            len(self.messages),
        )

        data = self.client.post_chat(self.credential.endpoint_url, body)
        # Parse everything before touching state so a malformed body leaves
        # history and usage as they were.
        response = ChatResponse.from_dict(data)

        for choice in response.choices:
            self._add_message(choice.message.role, choice.message.content)
        self.usage.add(response.usage)
        self.last_model = response.model
        self.last_created = response.created
        logger.debug(
            "Received %d choice(s); usage now %s", len(response.choices), self.usage
        )
        return response.choices

    def close(self) -> None:
        self.client.close()
