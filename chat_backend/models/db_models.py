"""Database models for the application."""
from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid
from chat_backend.database import Base


def generate_id():
    """Generate a unique ID."""
    return f"{uuid.uuid4().hex[:12]}"


class Conversation(Base):
    """Conversation model - one interview session."""
    __tablename__ = "conversations"

    id = Column(String, primary_key=True, default=generate_id)
    status = Column(String, nullable=False, default="in_progress")  # "in_progress", "completed", "terminated"
    # "metadata" is reserved on declarative classes, so the attribute name differs from the column name
    metadata_json = Column("metadata", Text, nullable=True)  # JSON string, see ConversationMetadata
    version = Column(Integer, nullable=False, default=1)

    # Python-side defaults keep microsecond resolution on SQLite
    created_at = Column(DateTime, default=datetime.now, index=True)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    # Relationships
    messages = relationship(
        "Message",
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="Message.created_at",
    )

    __mapper_args__ = {"version_id_col": version}


class Message(Base):
    """Message model - immutable once written."""
    __tablename__ = "messages"

    id = Column(String, primary_key=True, default=generate_id)
    conversation_id = Column(
        String,
        ForeignKey("conversations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role = Column(String, nullable=False)  # "user", "assistant"
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.now, index=True)

    # Relationships
    conversation = relationship("Conversation", back_populates="messages")
