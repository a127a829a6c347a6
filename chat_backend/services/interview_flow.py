"""
Interview turn orchestration.

Every turn is a sequential pipeline against the store:
persist the user message, generate, classify, persist the outcome.
Status only moves forward: in_progress -> completed | terminated.
"""
import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Dict, List, NamedTuple, Optional

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from chat_backend.models.conversation import (
    ConversationMetadata,
    ROLE_ASSISTANT,
    ROLE_USER,
    STATUS_IN_PROGRESS,
    history_for_llm,
    is_terminal,
)
from chat_backend.models.db_models import Conversation, Message
from chat_backend.models.interview_script import (
    get_current_question,
    get_initial_question,
    get_terminal_question,
    process_user_response,
)
from chat_backend.services import gpt_llm
from chat_backend.services.termination import classify_termination

logger = logging.getLogger(__name__)


class InterviewFlowError(Exception):
    """Base class for turns that cannot be processed."""


class ConversationNotFoundError(InterviewFlowError):
    def __init__(self, conversation_id: str):
        super().__init__(f"Conversation {conversation_id} not found")
        self.conversation_id = conversation_id


class InterviewFinishedError(InterviewFlowError):
    def __init__(self, conversation_id: str, status: str):
        super().__init__(f"Conversation {conversation_id} has already ended ({status})")
        self.conversation_id = conversation_id
        self.status = status


class ConcurrentTurnError(InterviewFlowError):
    """Another writer updated the conversation while this turn was running."""


class GatewayFailure(InterviewFlowError):
    """The model produced nothing; the user message is saved and the status is unchanged."""

    def __init__(self, conversation_id: str, status: str, user_message: str, cause: Exception):
        super().__init__(str(cause))
        self.conversation_id = conversation_id
        self.status = status
        self.user_message = user_message


class ChatTurn(NamedTuple):
    conversation_id: str
    messages: List[Message]
    status: str
    end_reason: Optional[str] = None


class _LockEntry:
    """A conversation's lock and the number of callers holding or waiting on it."""

    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


# One lock per conversation id serialises turns within this process.
# Entries exist only while some caller holds or waits on them.
_conversation_locks: Dict[str, _LockEntry] = {}
_locks_guard = threading.Lock()


@contextmanager
def conversation_lock(conversation_id: str):
    with _locks_guard:
        entry = _conversation_locks.get(conversation_id)
        if entry is None:
            entry = _conversation_locks[conversation_id] = _LockEntry()
        entry.users += 1
    try:
        with entry.lock:
            yield
    finally:
        with _locks_guard:
            entry.users -= 1
            if entry.users == 0:
                del _conversation_locks[conversation_id]


def _add_message(db: Session, conversation: Conversation, role: str, content: str) -> Message:
    message = Message(conversation_id=conversation.id, role=role, content=content)
    db.add(message)
    db.commit()
    db.refresh(message)
    return message


def start_interview(db: Session) -> ChatTurn:
    """Create a conversation and post the fixed opening question. No model call."""
    conversation = Conversation(
        status=STATUS_IN_PROGRESS,
        metadata_json=ConversationMetadata.new_session().to_json(),
    )
    db.add(conversation)
    db.flush()
    opening = Message(
        conversation_id=conversation.id,
        role=ROLE_ASSISTANT,
        content=get_initial_question().text,
    )
    db.add(opening)
    db.commit()
    db.refresh(opening)

    logger.info(f"📝 Started interview {conversation.id}")
    return ChatTurn(conversation.id, [opening], STATUS_IN_PROGRESS)


def submit_answer(db: Session, conversation_id: str, user_text: str) -> ChatTurn:
    """
    Process one candidate answer.

    Raises:
        ConversationNotFoundError: unknown conversation id, nothing written
        InterviewFinishedError: the conversation is terminal, nothing written
        GatewayFailure: the model call failed after the user message was saved
        ConcurrentTurnError: the conversation changed under this turn
        SQLAlchemyError: persistence failed; the session is rolled back
    """
    with conversation_lock(conversation_id):
        try:
            return _run_turn(db, conversation_id, user_text)
        except StaleDataError as e:
            db.rollback()
            logger.warning(f"⚠️ Concurrent update on conversation {conversation_id}")
            raise ConcurrentTurnError(str(e)) from e
        except InterviewFlowError:
            raise
        except Exception:
            db.rollback()
            raise


def _run_turn(db: Session, conversation_id: str, user_text: str) -> ChatTurn:
    conversation = db.query(Conversation).filter(Conversation.id == conversation_id).first()
    if conversation is None:
        raise ConversationNotFoundError(conversation_id)
    if is_terminal(conversation.status):
        raise InterviewFinishedError(conversation_id, conversation.status)

    questions_asked = sum(1 for m in conversation.messages if m.role == ROLE_ASSISTANT)
    answered_question = get_current_question(questions_asked)
    user_message = _add_message(db, conversation, ROLE_USER, user_text)

    history = history_for_llm(conversation.messages)
    try:
        reply = gpt_llm.generate_response(history)
    except gpt_llm.LLMServiceError as e:
        logger.error(f"❌ Gateway failure on conversation {conversation_id}: {e}")
        raise GatewayFailure(conversation_id, conversation.status, e.user_message, e) from e

    assistant_message = None
    if reply.text:
        assistant_message = _add_message(db, conversation, ROLE_ASSISTANT, reply.text)

    metadata = ConversationMetadata.from_json(conversation.metadata_json)
    metadata.mark_questions_complete(list(reply.completed_questions))
    metadata.extra = process_user_response(metadata.extra, answered_question.id, user_text)

    decision = classify_termination(reply.text, reply.end_interview_reason)
    conversation.metadata_json = metadata.to_json()
    conversation.status = decision.status
    conversation.updated_at = datetime.now()
    db.commit()

    logger.info(f"💬 Turn on {conversation_id}: status={decision.status} reason={decision.reason}")
    if decision.ended:
        get_terminal_question().complete(conversation_id)

    messages = [user_message]
    if assistant_message is not None:
        messages.append(assistant_message)
    return ChatTurn(conversation_id, messages, decision.status, decision.reason)
