"""Resolve the API key and chat URL from config files or the environment.

Sources are tried in a fixed order and the first one that supplies an
``api_key`` wins:

1. the config file given on the command line (``--config``),
2. ``~/.config/openai.ini``,
3. ``openai.ini`` in the current working directory,
4. the ``OPENAI_API_KEY`` environment variable, paired with the public
   OpenAI chat completions URL.

Config files are INI files with one section per service::

    [openai]
    api_key = sk-...
    chat_url = https://api.openai.com/v1/chat/completions

A file that is missing or does not parse is skipped.
"""

from __future__ import annotations

import configparser
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional, Union

from .errors import ConfigUnreadable, CredentialNotFound

logger = logging.getLogger(__name__)

DEFAULT_SERVICE = "openai"
CONFIG_FILENAME = "openai.ini"
API_KEY_ENV_VAR = "OPENAI_API_KEY"
DEFAULT_CHAT_URL = "https://api.openai.com/v1/chat/completions"


@dataclass(frozen=True)
class EndpointCredential:
    api_key: str
    endpoint_url: str
    # Where the key came from: a config file path or the environment variable.
    source: str = field(default="", compare=False)

    @property
    def is_complete(self) -> bool:
        """An empty URL means the endpoint is unresolved and must not be called."""
        return bool(self.api_key) and bool(self.endpoint_url)

    def __repr__(self) -> str:
        return (
            f"EndpointCredential(api_key='***', endpoint_url={self.endpoint_url!r}, "
            f"source={self.source!r})"
        )


def service_name(service: Optional[str] = None) -> str:
    return service or DEFAULT_SERVICE


def _home_dir() -> Optional[Path]:
    try:
        return Path.home()
    except RuntimeError:
        return None


def candidate_files(
    user_config: Optional[Union[str, Path]] = None,
    *,
    home: Optional[Path] = None,
    cwd: Optional[Path] = None,
) -> List[Path]:
    """Return the config files to try, highest priority first."""
    files: List[Path] = []
    if user_config:
        files.append(Path(user_config))

    home = home if home is not None else _home_dir()
    if home is not None and str(home):
        files.append(home / ".config" / CONFIG_FILENAME)

    cwd = cwd if cwd is not None else Path.cwd()
    files.append(cwd / CONFIG_FILENAME)
    return files


def load_service_config(
    path: Union[str, Path], service: Optional[str] = None
) -> EndpointCredential:
    """Read ``api_key`` and ``chat_url`` for *service* from the INI file at *path*.

    Missing keys come back as empty strings. Raises :class:`ConfigUnreadable`
    if the file cannot be read or parsed.
    """
    path = Path(path)
    parser = configparser.ConfigParser(interpolation=None)
    try:
        # utf-8-sig also accepts files saved with a byte order mark
        with path.open(encoding="utf-8-sig") as fh:
            parser.read_file(fh)
    except (OSError, UnicodeDecodeError, configparser.Error) as exc:
        raise ConfigUnreadable(path, str(exc)) from exc

    section = service_name(service)
    if not parser.has_section(section):
        return EndpointCredential(api_key="", endpoint_url="", source=str(path))
    return EndpointCredential(
        api_key=parser.get(section, "api_key", fallback="").strip(),
        endpoint_url=parser.get(section, "chat_url", fallback="").strip(),
        source=str(path),
    )


def find_service_config(
    user_config: Optional[Union[str, Path]] = None,
    service: Optional[str] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
    home: Optional[Path] = None,
    cwd: Optional[Path] = None,
) -> EndpointCredential:
    """Return the credential from the first source that has an API key.

    A file that supplies a key but no ``chat_url`` still wins; the returned
    credential then has an empty ``endpoint_url`` and callers must not use it
    for a request. Raises :class:`CredentialNotFound` when nothing matches.
    """
    section = service_name(service)
    for path in candidate_files(user_config, home=home, cwd=cwd):
        try:
            credential = load_service_config(path, section)
        except ConfigUnreadable as exc:
            logger.debug("Skipping %s: %s", exc.path, exc.reason)
            continue
        if credential.api_key:
            logger.info("Using [%s] credentials from %s", section, path)
            if not credential.endpoint_url:
                logger.warning("No chat_url for [%s] in %s", section, path)
            return credential
        logger.debug("No api_key for [%s] in %s", section, path)

    environ = os.environ if environ is None else environ
    api_key = environ.get(API_KEY_ENV_VAR)
    if api_key:
        logger.info("Using %s from the environment", API_KEY_ENV_VAR)
        return EndpointCredential(
            api_key=api_key, endpoint_url=DEFAULT_CHAT_URL, source=API_KEY_ENV_VAR
        )

    raise CredentialNotFound(
        f"No api_key for [{section}] in any config file and {API_KEY_ENV_VAR} is not set"
    )
