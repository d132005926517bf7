"""Wire types for chat completion requests and responses."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from .errors import TransportFailure


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Message:
    role: Role
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role.value, "content": self.content}


# Generation parameters copied into the request body when set. ``model`` is
# handled separately because it is mandatory.
OPTIONAL_FIELDS = (
    "frequency_penalty",
    "logprobs",
    "top_logprobs",
    "max_tokens",
    "n",
    "presence_penalty",
    "seed",
    "stop",
    "temperature",
    "top_p",
    "parallel_tool_calls",
    "user",
)


@dataclass(frozen=True)
class GenerationConfig:
    """Model id plus the optional sampling parameters sent with every turn.

    Fields left as ``None`` are omitted from the request body entirely; some
    endpoints reject an explicit ``null`` next to other fields.
    """

    model: str
    frequency_penalty: Optional[float] = None
    logprobs: Optional[bool] = None
    top_logprobs: Optional[int] = None
    max_tokens: Optional[int] = None
    n: Optional[int] = None
    presence_penalty: Optional[float] = None
    seed: Optional[int] = None
    stop: Optional[str] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    parallel_tool_calls: Optional[bool] = None
    user: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.model, str) or not self.model:
            raise ValueError("model must be a non-empty string")
        if self.top_logprobs is not None and self.top_logprobs < 0:
            raise ValueError("top_logprobs must be non-negative")
        if self.max_tokens is not None and self.max_tokens <= 0:
            raise ValueError("max_tokens must be positive")
        if self.n is not None and self.n <= 0:
            raise ValueError("n must be positive")

    def payload_fields(self) -> Dict[str, Any]:
        """Return the set optional parameters, keyed by their wire name."""
        values = {name: getattr(self, name) for name in OPTIONAL_FIELDS}
        return {name: value for name, value in values.items() if value is not None}

    def describe(self) -> str:
        lines = ["GenerationConfig", f"model: {self.model}"]
        for name, value in self.payload_fields().items():
            lines.append(f"{name}: {value}")
        return "\n".join(lines)


def build_request_body(
    config: GenerationConfig, messages: Sequence[Message]
) -> Dict[str, Any]:
    """Build the JSON body for one call: the model, the full transcript and
    every generation parameter that has a value."""
    body: Dict[str, Any] = {
        "model": config.model,
        "messages": [m.to_dict() for m in messages],
    }
    body.update(config.payload_fields())
    return body


@dataclass
class UsageTotals:
    completion_tokens: int = 0
    prompt_tokens: int = 0
    total_tokens: int = 0

    def add(self, other: "UsageTotals") -> None:
        self.completion_tokens += other.completion_tokens
        self.prompt_tokens += other.prompt_tokens
        self.total_tokens += other.total_tokens

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "UsageTotals":
        # Some compatible servers leave usage out entirely; count that as zero.
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise TransportFailure("malformed response body: usage is not an object")
        counts = {}
        for f in fields(cls):
            value = data.get(f.name, 0)
            if value is None:
                value = 0
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise TransportFailure(
                    f"malformed response body: usage.{f.name} is {value!r}"
                )
            counts[f.name] = value
        return cls(**counts)


@dataclass(frozen=True)
class Choice:
    message: Message

    @classmethod
    def from_dict(cls, data: Any) -> "Choice":
        try:
            message = data["message"]
            role = Role(message["role"])
            content = message.get("content")
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise TransportFailure(f"malformed response body: bad choice {data!r}") from exc
        if content is None:
            content = ""
        if not isinstance(content, str):
            raise TransportFailure("malformed response body: content is not a string")
        return cls(message=Message(role=role, content=content))


@dataclass
class ChatResponse:
    choices: List[Choice]
    created: Optional[int] = None
    model: Optional[str] = None
    usage: UsageTotals = field(default_factory=UsageTotals)

    @classmethod
    def from_dict(cls, data: Any) -> "ChatResponse":
        """Parse a success body. Raises :class:`TransportFailure` when the body
        does not have the expected shape."""
        if not isinstance(data, dict):
            raise TransportFailure("malformed response body: expected a JSON object")
        raw_choices = data.get("choices")
        if not isinstance(raw_choices, list):
            raise TransportFailure("malformed response body: missing choices")
        return cls(
            choices=[Choice.from_dict(c) for c in raw_choices],
            created=data.get("created"),
            model=data.get("model"),
            usage=UsageTotals.from_dict(data.get("usage")),
        )
