"""Decide whether an interview turn ended the conversation, and why."""
import logging
from typing import NamedTuple, Optional

from chat_backend.models.conversation import STATUS_COMPLETED, STATUS_IN_PROGRESS
from chat_backend.services.interview_prompts import (
    END_REASON_COMPLETED,
    END_REASON_NOT_INTERESTED,
    END_REASON_UNCLEAR_COMMUNICATION,
    NOT_A_FIT_CLOSING,
    RELOCATION_CLOSING,
    UNCLEAR_COMMUNICATION_CLOSING,
    WARM_RELOCATION_CLOSING,
)

logger = logging.getLogger(__name__)

NOT_INTERESTED_PHRASES = (
    "Thank you for your time",
    "best of luck",
    "best in your job search",
    "wrap up the interview here",
)

# Closing phrases not already covered by NOT_INTERESTED_PHRASES
GENERIC_CLOSING_PHRASES = (
    RELOCATION_CLOSING,
    WARM_RELOCATION_CLOSING,
    "Thanks again for your time",
    NOT_A_FIT_CLOSING,
)

# Checked in order, first hit wins
PHRASE_RULES = (
    (END_REASON_UNCLEAR_COMMUNICATION, (UNCLEAR_COMMUNICATION_CLOSING,)),
    (END_REASON_NOT_INTERESTED, NOT_INTERESTED_PHRASES),
    (END_REASON_COMPLETED, GENERIC_CLOSING_PHRASES),
)


class TerminationDecision(NamedTuple):
    status: str
    reason: Optional[str] = None

    @property
    def ended(self) -> bool:
        return self.status != STATUS_IN_PROGRESS


CONTINUE = TerminationDecision(STATUS_IN_PROGRESS, None)


def match_closing_phrase(reply: Optional[str]) -> Optional[str]:
    """Return the end reason of the first closing phrase found in ``reply``, if any."""
    if not reply:
        return None
    for reason, phrases in PHRASE_RULES:
        for phrase in phrases:
            if phrase in reply:
                return reason
    return None


def classify_termination(assistant_reply: Optional[str], structured_reason: Optional[str]) -> TerminationDecision:
    """
    Classify one assistant turn.

    An explicit end_interview directive from the model always wins. Without
    one, the reply text is scanned for the script's closing sentences; a hit
    there means the model ended the interview without signalling it, which is
    logged as a degraded path.

    Args:
        assistant_reply: The assistant's reply text, or None if it produced none
        structured_reason: Reason argument of the end_interview tool call, if any

    Returns:
        TerminationDecision with the new status and the end reason (None while in progress)
    """
    if structured_reason:
        return TerminationDecision(STATUS_COMPLETED, structured_reason)

    reason = match_closing_phrase(assistant_reply)
    if reason is None:
        return CONTINUE

    logger.warning(f"⚠️ Interview end detected from reply text without end_interview directive (reason: {reason})")
    return TerminationDecision(STATUS_COMPLETED, reason)
