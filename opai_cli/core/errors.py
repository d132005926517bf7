"""Error types raised by the resolver, the transport and the session."""

from __future__ import annotations

from pathlib import Path
from typing import Union


class OpaiError(Exception):
    """Base class for every error raised by :mod:`opai_cli`."""


class TransportFailure(OpaiError):
    """The request never produced a usable response.

    Covers DNS and connection errors, timeouts and response bodies that cannot
    be decoded. Never retried.
    """


class EndpointRejected(OpaiError):
    """The endpoint answered with a non-2xx status."""

    def __init__(self, status_code: int, detail: str = "") -> None:
        self.status_code = status_code
        self.detail = detail
        message = f"Http Error: {status_code}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class ConfigUnreadable(OpaiError):
    """A candidate config file could not be loaded."""

    def __init__(self, path: Union[str, Path], reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Config Error: {self.path}: {reason}")


class CredentialNotFound(OpaiError):
    """No source supplied an API key, or the resolved credential is incomplete."""
