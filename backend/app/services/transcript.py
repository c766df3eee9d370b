"""
Transcript formatting: split one stored chat record into ordered (user, assistant) turns.

user_question may hold a whole multi-turn exchange, turns joined by a line that is exactly
"------". Dashes inside Markdown tables are not on a line of their own and never split.
assistant_answer always holds the final assistant turn.
"""
from dataclasses import asdict, dataclass
from typing import Any, Mapping

from app.core.constants import TURN_DELIMITER

_SPLIT_ON = f"\n{TURN_DELIMITER}\n"


@dataclass(frozen=True)
class Turn:
    user: str
    assistant: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


def _field(record: Any, name: str) -> str:
    if isinstance(record, Mapping):
        value = record.get(name)
    else:
        value = getattr(record, name, None)
    return value or ""


def split_segments(user_question: str) -> list[str]:
    """Non-empty, stripped segments of user_question between delimiter lines."""
    if not user_question:
        return []
    return [s.strip() for s in user_question.split(_SPLIT_ON) if s.strip()]


def format_turns(record: Any) -> list[Turn]:
    """
    Turns for one record (row mapping or ORM object).

    - 0 or 1 segment: a single turn; user is query_text, falling back to the segment.
    - Otherwise segments pair up in order (user, assistant, user, ...). An odd count
      leaves the last turn's assistant empty.
    - A non-empty assistant_answer replaces the last turn's assistant.
    """
    query_text = _field(record, "query_text")
    answer = _field(record, "assistant_answer")
    parts = split_segments(_field(record, "user_question"))

    if len(parts) <= 1:
        return [Turn(user=query_text or (parts[0] if parts else ""), assistant=answer)]

    turns = [
        Turn(user=parts[i], assistant=parts[i + 1] if i + 1 < len(parts) else "")
        for i in range(0, len(parts), 2)
    ]
    if answer:
        turns[-1] = Turn(user=turns[-1].user, assistant=answer)
    return turns
