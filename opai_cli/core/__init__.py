from .errors import (
    ConfigUnreadable,
    CredentialNotFound,
    EndpointRejected,
    OpaiError,
    TransportFailure,
)
from .service_config import EndpointCredential, find_service_config
from .session import DEFAULT_SYSTEM_PROMPT, Session
from .types import ChatResponse, Choice, GenerationConfig, Message, Role, UsageTotals

__all__ = [
    "ChatResponse",
    "Choice",
    "ConfigUnreadable",
    "CredentialNotFound",
    "DEFAULT_SYSTEM_PROMPT",
    "EndpointCredential",
    "EndpointRejected",
    "GenerationConfig",
    "Message",
    "OpaiError",
    "Role",
    "Session",
    "TransportFailure",
    "UsageTotals",
    "find_service_config",
]
