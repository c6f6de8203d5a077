from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Literal, Mapping, Optional, Sequence

from .aggregate import ExternalInput, correct_text, parse_external
from .config import ScoringConfig
from .rules import CorrectionRule
from .schemas import CorrectionResult, DetectedError, ErrorType


Level = Literal["beginner", "intermediate", "advanced"]

REPLIES: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "beginner": (
            "That's great! What did you do next?",
            "I understand. Can you tell me more?",
            "Very good! How did you feel about that?",
            "Nice! What happened after that?",
            "Good job! Can you share another example?",
        ),
        "intermediate": (
            "That sounds interesting! Could you elaborate on that experience?",
            "I see what you mean. What was your overall impression?",
            "That's a good point. How do you think it could be improved?",
            "Interesting perspective! Have you encountered similar situations before?",
            "That makes sense. What would you do differently next time?",
        ),
        "advanced": (
            "That's a sophisticated viewpoint. What factors led you to that conclusion?",
            "Your analysis is quite thoughtful. How might this apply to broader contexts?",
            "That's an insightful observation. What implications do you see for the future?",
            "Your reasoning is well-structured. Could you explore the counterarguments?",
            "That's a nuanced perspective. How might different stakeholders view this issue?",
        ),
        "continuation": (
            "That's wonderful! Please continue.",
            "Excellent communication! What's your next thought?",
            "Perfect English! I'd love to hear more.",
            "Outstanding! Please elaborate on that.",
            "Fantastic! Keep the conversation going.",
        ),
    }
)


def encouragement(errors: Sequence[DetectedError]) -> str:
    if not errors:
        return "Perfect! Your English is excellent. Keep up the great work!"
    if any(e.type == ErrorType.CONTRACTION for e in errors):
        return (
            "You're close! Remember apostrophes in contractions like \"I'm\" and \"you're\". "
            "Notice the apostrophe in \"I'm\" - it's short for \"I am\"."
        )
    if len(errors) <= 2:
        return "Great job! Just a few small improvements and you'll be perfect!"
    return "Good progress! Keep practicing - every correction helps you improve!"


@dataclass
class ConversationSession:
    """
    Per-learner conversation state. Replies rotate through each topic's list
    in order; each topic keeps its own position.
    """

    level: Level = "intermediate"
    replies: Mapping[str, tuple[str, ...]] = field(default_factory=lambda: REPLIES)
    _last: dict[str, int] = field(default_factory=dict, repr=False)

    def next_reply(self, topic: str) -> str:
        options = self.replies.get(topic) or self.replies["continuation"]
        index = (self._last.get(topic, -1) + 1) % len(options)
        self._last[topic] = index
        return options[index]


@dataclass(frozen=True)
class ConversationTurn:
    correction: CorrectionResult
    reply: str
    encouragement: str


def conversation_turn(
    session: ConversationSession,
    text: str,
    external: ExternalInput = None,
    rules: Optional[Sequence[CorrectionRule]] = None,
    config: Optional[ScoringConfig] = None,
) -> ConversationTurn:
    ext = parse_external(external)
    result = correct_text(text, ext, rules, config)

    if ext and ext.reply and ext.reply.strip():
        reply = ext.reply.strip()
    elif result.has_errors:
        reply = session.next_reply(session.level)
    else:
        reply = session.next_reply("continuation")

    return ConversationTurn(correction=result, reply=reply, encouragement=encouragement(result.errors))


def format_coach_message(turn: ConversationTurn, prompt: str = "Hello! How are you?") -> str:
    """Chat-style message: the main correction, a retry line, then the reply."""
    result = turn.correction
    if not result.has_errors:
        return turn.reply

    lines: list[str] = []
    head = "You're close! " if len(result.errors) <= 2 else ""
    if result.errors:
        main = result.errors[0]
        lines.append(f'{head}Instead of "{main.original}", we typically say "{main.corrected}". {main.explanation}'.strip())
    elif head:
        lines.append(head.strip())
    lines.append("")
    lines.append("So, let's try again:")
    lines.append("")
    lines.append(f"Person A (me): {prompt}")
    lines.append(f"Person B (you): {result.corrected}")
    lines.append("")
    lines.append("Now it's my turn again:")
    lines.append(turn.reply)
    lines.append("")
    lines.append("Your turn!")
    return "\n".join(lines)
