"""Terminal chat client for OpenAI-compatible chat completion endpoints."""
from __future__ import annotations

import argparse
import os
import readline
import sys
from pathlib import Path
from typing import List, Optional

from rich.markup import escape
from rich.panel import Panel

from .core import (
    DEFAULT_SYSTEM_PROMPT,
    Choice,
    CredentialNotFound,
    GenerationConfig,
    OpaiError,
    Session,
    find_service_config,
)
from .core.client import OpenAIClientWrapper
from .core.service_config import service_name
from .utils import (
    ASSISTANT_PROMPT,
    USER_PROMPT,
    Spinner,
    configure_logging,
    console,
    styled,
)

HISTORY_FILE = Path.home() / ".opai_history"
DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_TEMPERATURE = 0.5

HELP_TEXT = """\
Type a message and press Enter to send it with the whole conversation.

Commands:
  /help     show this help
  /config   show the model, generation settings and endpoint
  /usage    show token usage for this session
  /exit     quit (Ctrl-D works too)"""


# ---------------------------------------------------------------------------
# Helper classes
# ---------------------------------------------------------------------------


class ChatCLI:
    """High-level orchestration class for the interactive REPL."""

    def __init__(self, session: Session, history_file: Optional[Path] = HISTORY_FILE):
        self.session = session
        self.history_file = history_file

    # ---------------- Readline history ----------------

    def load_history(self) -> None:
        if self.history_file is None:
            return
        try:
            readline.read_history_file(str(self.history_file))
        except OSError:
            console.print(styled("No previous history", "opai.muted"))

    def save_history(self) -> None:
        if self.history_file is None:
            return
        try:
            readline.write_history_file(str(self.history_file))
        except OSError as exc:
            console.print(styled(f"Could not save history: {exc}", "opai.notice"))

    # ---------------- Output ----------------

    def print_choices(self, choices: List[Choice]) -> None:
        """Print each choice; the first one continues the spinner's label line."""
        if not choices:
            console.print()
        for idx, choice in enumerate(choices):
            content = escape(choice.message.content)
            if idx == 0:
                console.print(content)
            else:
                console.print(f"{ASSISTANT_PROMPT}{content}")

    def print_error(self, exc: OpaiError) -> None:
        console.print("\n" + styled(f"Failed: {exc}", "opai.error"))

    # ---------------- Turn handling ----------------

    def send(self, line: str) -> bool:
        """Run one turn and print the reply. Return False if the turn failed."""
        spinner = Spinner(prefix=ASSISTANT_PROMPT)
        try:
            with spinner:
                choices = self.session.submit_turn(line)
        except OpaiError as exc:
            self.print_error(exc)
            return False
        except KeyboardInterrupt:
            console.print("\n[interrupted]", markup=False)
            return False
        self.print_choices(choices)
        return True

    # ---------------- Command handling ---------------

    def handle_command(self, line: str) -> bool:
        """Handle slash commands. Return False to exit REPL."""

        parts = line.strip().split()
        if not parts:
            return True

        cmd = parts[0].lower()

        if cmd == "/help":
            console.print(HELP_TEXT, markup=False)

        elif cmd == "/exit":
            console.print("Bye!")
            return False

        elif cmd == "/config":
            console.print(self.session.config.describe(), markup=False)
            console.print(f"endpoint: {self.session.credential.endpoint_url}", markup=False)

        elif cmd == "/usage":
            usage = self.session.usage
            console.print(
                f"prompt_tokens: {usage.prompt_tokens}\n"
                f"completion_tokens: {usage.completion_tokens}\n"
                f"total_tokens: {usage.total_tokens}",
                markup=False,
            )

        else:
            console.print(styled(f"Unknown command: {cmd} (see /help)", "opai.error"))

        return True

    # ---------------- Interaction loop ---------------

    def repl(self) -> None:
        """Run the interactive read–eval–print-loop."""
        console.print(Panel.fit("OpenAI Chat CLI", style="bold magenta"))
        console.print(
            styled(f"Current model: {self.session.config.model}.", "opai.notice"),
            styled("Type /help for help.", "opai.notice"),
            sep="\n",
        )
        self.load_history()

        try:
            while True:
                try:
                    line = console.input(USER_PROMPT)
                except KeyboardInterrupt:
                    console.print("\nInterrupted")
                    break
                except EOFError:
                    console.print("\nEOF")
                    break

                if not line.strip():
                    continue

                if line.startswith("/"):
                    if not self.handle_command(line):
                        break
                    continue

                self.send(line)
        finally:
            self.save_history()


# ---------------------------------------------------------------------------
# Entrypoint helpers (keeping it separate simplifies __main__ handling)
# ---------------------------------------------------------------------------

def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="opai",
        description="Interactive CLI for OpenAI-compatible chat completion endpoints.",
    )
    parser.add_argument("--config", "-c", help="INI file to read api_key/chat_url from")
    parser.add_argument("--service", help="Config section to use (default: 'openai')")
    parser.add_argument("--system", "-s", help="System prompt", default=DEFAULT_SYSTEM_PROMPT)
    parser.add_argument(
        "--model",
        "-m",
        help="Model name",
        default=os.getenv("OPENAI_DEFAULT_MODEL", DEFAULT_MODEL),
    )
    parser.add_argument("--temperature", type=float, default=DEFAULT_TEMPERATURE)
    parser.add_argument("--top-p", type=float)
    parser.add_argument("--max-tokens", type=int)
    parser.add_argument("--seed", type=int)
    parser.add_argument("--frequency-penalty", type=float)
    parser.add_argument("--presence-penalty", type=float)
    parser.add_argument("--stop", help="Stop sequence")
    parser.add_argument("--user", help="End-user identifier sent with each request")
    parser.add_argument("--timeout", type=float, help="Request timeout in seconds")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    subcommands = parser.add_subparsers(dest="command")
    ask = subcommands.add_parser("ask", help="Send a single query and exit")
    ask.add_argument("--query", "-q", required=True)
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> GenerationConfig:
    return GenerationConfig(
        model=args.model,
        temperature=args.temperature,
        top_p=args.top_p,
        max_tokens=args.max_tokens,
        seed=args.seed,
        frequency_penalty=args.frequency_penalty,
        presence_penalty=args.presence_penalty,
        stop=args.stop,
        user=args.user,
    )


def run_cli(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = build_config(args)
    except ValueError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 2

    # ------------------------------------------------------------------
    # Resolve endpoint & build session
    # ------------------------------------------------------------------
    try:
        credential = find_service_config(args.config, args.service)
    except CredentialNotFound:
        console.print("Unable to find key")
        return 1
    if not credential.is_complete:
        console.print(
            f"Found api_key for [{service_name(args.service)}] in {credential.source} "
            "but no chat_url; add chat_url to that section",
            markup=False,
        )
        return 1
    client = OpenAIClientWrapper.for_credential(credential, timeout=args.timeout)
    session = Session(credential, args.system, config, client=client)

    try:
        if args.command == "ask":
            return 0 if ChatCLI(session, history_file=None).send(args.query) else 1
        ChatCLI(session).repl()
        return 0
    finally:
        session.close()


def main() -> None:  # pragma: no cover
    sys.exit(run_cli())


if __name__ == "__main__":  # pragma: no cover
    main()
