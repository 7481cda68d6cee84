"""Guided onboarding — the two-question detour behind the first ``help``.

The first time a visitor asks for help, the shell asks whether it may
ask a question, then whether the visitor knows their way around a
terminal, and answers with tips to match.  While a question is pending
every line is treated as an answer, not a command.

The detour is a small finite-state machine::

    IDLE ──help──▶ AWAITING_START ──yes──▶ AWAITING_EXPERIENCE ──yes/no──▶ IDLE
                        │
                        └──no──▶ IDLE

Anything other than y/yes/n/no (any case) reprompts without changing
state.  The detour is marked as seen the moment it starts, so it runs at
most once per session whether it is completed or declined.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

YES_NO_PROMPT = "Yes/No"

GREETING = (
    "Greetings, dear traveler! You seem weary from your travels. "
    f"May I trouble you with a question?\n{YES_NO_PROMPT}"
)
REPROMPT = f"Please answer:\n{YES_NO_PROMPT}"
DECLINED = "I understand. Take your time!"
EXPERIENCE_QUESTION = (
    "Ah! Well in that case, do you have any experience in the art of terminal navigation?"
    f"\n{YES_NO_PROMPT}"
)
EXPERIENCED_TIPS = """\
Splendid! You may navigate this library with the same vigor you bring to your own shell!

You may also explore commands such as:
- search <term>          look for specific books or texts
- open <chapter name>    read one of the pieces

May this place bring you some quiet."""
BEGINNER_TIPS = """\
No worries, we'll start simple:

- ls                 list what's here
- cd <dir>           move around
- home               return to the beginning
- back               go to the previous place
- open <file|dir>    open a chapter or step into a folder
- cat <file>         read a file without changing location
- search <term>      find chapters by name or tags
- tree [-L depth]    see the structure
- clear              clear the screen
- summary            quick start sheet"""

_YES = frozenset({"y", "yes"})
_NO = frozenset({"n", "no"})


class OnboardingStep(StrEnum):
    """Where the visitor is in the onboarding detour."""

    IDLE = "idle"
    AWAITING_START = "awaiting_start"
    AWAITING_EXPERIENCE = "awaiting_experience"


def parse_answer(text: str) -> bool | None:
    """Parse a yes/no answer.

    Returns:
        True for yes, False for no, None for anything else.

    """
    answer = text.strip().lower()
    if answer in _YES:
        return True
    if answer in _NO:
        return False
    return None


@dataclass
class Onboarding:
    """The onboarding state machine for one session."""

    step: OnboardingStep = OnboardingStep.IDLE
    seen: bool = False

    @property
    def active(self) -> bool:
        """Return True while a question is waiting for an answer."""
        return self.step is not OnboardingStep.IDLE

    def should_start(self) -> bool:
        """Return True if ``help`` should open the detour instead of the grid."""
        return not self.seen and self.step is OnboardingStep.IDLE

    def start(self) -> str:
        """Enter the detour and return the greeting."""
        self.seen = True
        self.step = OnboardingStep.AWAITING_START
        return GREETING

    def answer(self, text: str) -> str:
        """Feed one line of input to the pending question.

        Returns:
            The shell's reply.

        Raises:
            RuntimeError: If no question is pending.

        """
        reply = parse_answer(text)
        match self.step:
            case OnboardingStep.IDLE:
                msg = "No onboarding question is pending"
                raise RuntimeError(msg)
            case _ if reply is None:
                return REPROMPT
            case OnboardingStep.AWAITING_START if not reply:
                self.step = OnboardingStep.IDLE
                return DECLINED
            case OnboardingStep.AWAITING_START:
                self.step = OnboardingStep.AWAITING_EXPERIENCE
                return EXPERIENCE_QUESTION
            case OnboardingStep.AWAITING_EXPERIENCE:
                self.step = OnboardingStep.IDLE
                return EXPERIENCED_TIPS if reply else BEGINNER_TIPS
