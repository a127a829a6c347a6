"""Conversation state vocabulary, metadata record and JSON views."""
from typing import Any, Dict, List, Optional
from datetime import datetime
import json
import logging

logger = logging.getLogger(__name__)

STATUS_IN_PROGRESS = "in_progress"
STATUS_COMPLETED = "completed"
# Declared for stored data and clients; no turn currently produces it
STATUS_TERMINATED = "terminated"

TERMINAL_STATUSES = frozenset({STATUS_COMPLETED, STATUS_TERMINATED})

ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"


def is_terminal(status: Optional[str]) -> bool:
    """Whether a conversation in this status accepts no further turns."""
    return status in TERMINAL_STATUSES


class ConversationMetadata:
    """
    Typed view over the conversation's stored metadata map.

    Known keys are exposed as attributes; unknown keys are carried in
    ``extra`` so that writing the record back never loses data.
    """

    def __init__(
        self,
        name: Optional[str] = None,
        session_number: Optional[int] = None,
        completed_questions: Optional[List[str]] = None,
        extra: Optional[Dict[str, Any]] = None
    ):
        """
        Args:
            name: Display name shown in the session list
            session_number: Session discriminator (creation time in epoch ms)
            completed_questions: Question ids the model reported complete
            extra: Any other keys found in the stored map
        """
        self.name = name
        self.session_number = session_number
        self.completed_questions: List[str] = list(completed_questions or [])
        self.extra: Dict[str, Any] = dict(extra or {})

    @classmethod
    def new_session(cls) -> "ConversationMetadata":
        """Metadata for a freshly started interview."""
        return cls(session_number=int(datetime.now().timestamp() * 1000))

    @classmethod
    def from_dict(cls, data: Any) -> "ConversationMetadata":
        """Build from a decoded map; anything that isn't a map is treated as empty."""
        if not isinstance(data, dict):
            return cls()
        data = dict(data)

        name = data.pop("name", None)
        if not isinstance(name, str):
            name = None

        session_number = data.pop("sessionNumber", None)
        if isinstance(session_number, bool) or not isinstance(session_number, int):
            session_number = None

        completed = data.pop("completedQuestions", None)
        if isinstance(completed, list):
            completed = [q for q in completed if isinstance(q, str)]
        else:
            completed = []

        return cls(
            name=name,
            session_number=session_number,
            completed_questions=completed,
            extra=data
        )

    @classmethod
    def from_json(cls, raw: Optional[str]) -> "ConversationMetadata":
        """Parse the stored column. Absent or malformed text yields an empty record."""
        if not raw:
            return cls()
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("⚠️ Unreadable conversation metadata, treating as empty")
            return cls()
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the stored map (camelCase keys, as the client reads them)."""
        data = dict(self.extra)
        if self.name is not None:
            data["name"] = self.name
        if self.session_number is not None:
            data["sessionNumber"] = self.session_number
        if self.completed_questions:
            data["completedQuestions"] = list(self.completed_questions)
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    def mark_questions_complete(self, question_ids: List[str]) -> bool:
        """Record question ids in report order. Returns True if anything was added."""
        added = False
        for question_id in question_ids:
            if question_id and question_id not in self.completed_questions:
                self.completed_questions.append(question_id)
                added = True
        return added


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def message_to_dict(message, include_conversation_id: bool = True) -> Dict[str, Any]:
    """JSON view of a Message row."""
    data = {
        "id": message.id,
        "role": message.role,
        "content": message.content,
        "createdAt": format_timestamp(message.created_at),
    }
    if include_conversation_id:
        data["conversationId"] = message.conversation_id
    return data


def conversation_summary(conversation) -> Dict[str, Any]:
    """JSON view of a Conversation row for the session list."""
    first_message = conversation.messages[:1]
    return {
        "id": conversation.id,
        "createdAt": format_timestamp(conversation.created_at),
        "status": conversation.status,
        "metadata": ConversationMetadata.from_json(conversation.metadata_json).to_dict(),
        "messages": [message_to_dict(m) for m in first_message],
    }


def history_for_llm(messages) -> List[Dict[str, str]]:
    """
    Format ordered Message rows for the LLM API.
    Returns list of dicts with 'role' and 'content' keys.
    """
    return [
        {
            "role": ROLE_USER if msg.role == ROLE_USER else ROLE_ASSISTANT,
            "content": msg.content,
        }
        for msg in messages
    ]
