"""Named styles and the shared console used for all terminal output.

Rich already honours ``NO_COLOR``, so nothing here checks for it.
"""

from rich.console import Console
from rich.markup import escape
from rich.theme import Theme

THEME = Theme(
    {
        "opai.user": "bold cyan",
        "opai.assistant": "bold green",
        "opai.error": "bold red",
        "opai.notice": "yellow",
        "opai.muted": "dim",
    }
)

console = Console(theme=THEME)


def styled(text: str, style: str) -> str:
    """Return *text* as literal markup in the named theme *style*."""
    return f"[{style}]{escape(text)}[/]"


USER_PROMPT = f"{styled('you', 'opai.user')}> "
ASSISTANT_PROMPT = f"{styled('assistant', 'opai.assistant')}> "
