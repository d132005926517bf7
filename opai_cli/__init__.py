"""Interactive CLI for chatting with OpenAI-compatible chat completion endpoints.

Features
--------
1. Endpoint resolution: the API key and chat URL come from an INI config file
   (``--config``, ``~/.config/openai.ini`` or ``./openai.ini``) or, failing
   that, from ``OPENAI_API_KEY`` with the public OpenAI URL.
2. Conversation sessions: every turn sends the whole transcript and appends the
   assistant's reply, keeping a running token usage total.
3. Generation settings: model, temperature, top_p and friends are fixed on the
   command line for the life of the session.

Run ``python -m opai_cli`` or the ``opai`` console script.
"""
# Re-export useful symbols for convenience
from .core import (
    DEFAULT_SYSTEM_PROMPT,
    EndpointCredential,
    GenerationConfig,
    Session,
    find_service_config,
)
from .core.client import OpenAIClientWrapper
from .cli import ChatCLI, run_cli

__all__ = [
    "DEFAULT_SYSTEM_PROMPT",
    "EndpointCredential",
    "GenerationConfig",
    "Session",
    "find_service_config",
    "OpenAIClientWrapper",
    "ChatCLI",
    "run_cli",
]
