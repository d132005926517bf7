from .log import configure_logging
from .spinner import Spinner
from .theme import ASSISTANT_PROMPT, USER_PROMPT, console, styled

__all__ = [
    "ASSISTANT_PROMPT",
    "USER_PROMPT",
    "console",
    "configure_logging",
    "styled",
    "Spinner",
]
