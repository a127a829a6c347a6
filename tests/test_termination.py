import logging

import pytest

from chat_backend.services.interview_prompts import (
    NOT_A_FIT_CLOSING,
    RELOCATION_CLOSING,
    UNCLEAR_COMMUNICATION_CLOSING,
    WARM_RELOCATION_CLOSING,
)
from chat_backend.services.termination import (
    TerminationDecision,
    classify_termination,
    match_closing_phrase,
)


def test_no_text_and_no_directive_stays_in_progress():
    assert classify_termination(None, None) == TerminationDecision("in_progress", None)
    assert classify_termination("", None) == TerminationDecision("in_progress", None)


def test_ordinary_reply_stays_in_progress():
    decision = classify_termination("Great! Could you please share your name to start?", None)
    assert decision.status == "in_progress"
    assert decision.reason is None
    assert not decision.ended


def test_structured_reason_wins_over_phrases():
    decision = classify_termination("Thanks for chatting, best of luck!", "salary_mismatch")
    assert decision == TerminationDecision("completed", "salary_mismatch")


def test_structured_reason_without_text():
    assert classify_termination(None, "degree_requirement") == TerminationDecision("completed", "degree_requirement")


def test_unclear_communication_sentence():
    decision = classify_termination(UNCLEAR_COMMUNICATION_CLOSING, None)
    assert decision == TerminationDecision("completed", "unclear_communication")


def test_unclear_communication_checked_before_not_interested():
    reply = f"{UNCLEAR_COMMUNICATION_CLOSING} Thank you for your time."
    assert classify_termination(reply, None).reason == "unclear_communication"


@pytest.mark.parametrize("reply", [
    "Thank you for your time! If you ever change your mind, feel free to reach out.",
    "No worries at all, best of luck!",
    "I wish you the best in your job search.",
    "To respect your time and ours, let's wrap up the interview here.",
])
def test_not_interested_phrases(reply):
    assert classify_termination(reply, None) == TerminationDecision("completed", "not_interested")


@pytest.mark.parametrize("reply", [
    RELOCATION_CLOSING,
    WARM_RELOCATION_CLOSING,
    "Thanks again for your time, we'll be in touch soon.",
    NOT_A_FIT_CLOSING,
])
def test_generic_closing_phrases(reply):
    assert classify_termination(reply, None) == TerminationDecision("completed", "completed")


def test_matching_is_case_sensitive():
    assert match_closing_phrase("thank you for your time") is None


def test_phrase_fallback_is_logged_as_degraded(caplog):
    with caplog.at_level(logging.WARNING, logger="chat_backend.services.termination"):
        classify_termination("Best wishes and best of luck!", None)
    assert "without end_interview directive" in caplog.text
