from dataclasses import dataclass
from typing import Any, Literal, Protocol


Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class ChatMessage:
    role: Role
    content: str


class JsonCompleter(Protocol):
    def complete_json(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        max_output_tokens: int = 900,
        purpose: str = "unknown",
    ) -> dict[str, Any] | None: ...
