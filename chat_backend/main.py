"""FastAPI application for the interview chat backend."""
import logging

from chat_backend.config import ALLOWED_ORIGINS, LOG_LEVEL, NAME_PROBE_MESSAGE

# Setup logging
logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

from fastapi import FastAPI, HTTPException, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError
import uvicorn

from chat_backend.database import init_db, get_db
from chat_backend.models.conversation import (
    ConversationMetadata,
    conversation_summary,
    message_to_dict,
)
from chat_backend.models.db_models import (
    Conversation as DBConversation,
    Message as DBMessage,
)
from chat_backend.models.interview_script import iter_script
from chat_backend.services.interview_flow import (
    ConcurrentTurnError,
    ConversationNotFoundError,
    GatewayFailure,
    InterviewFinishedError,
    conversation_lock,
    start_interview,
    submit_answer,
)

app = FastAPI(title="Interview Chat API")


@app.on_event("startup")
async def startup_event():
    """Initialize database tables on application startup."""
    init_db()
    logger.info("✅ Database initialized successfully")


# Enable CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": "Interview Chat API", "status": "running"}


@app.get("/api/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


# ============================================================
# Chat
# ============================================================

class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: Optional[str] = None
    conversation_id: Optional[str] = Field(None, alias="conversationId")
    is_initial: bool = Field(False, alias="isInitial")


def _turn_response(turn) -> dict:
    body = {
        "messages": [message_to_dict(m) for m in turn.messages],
        "conversationId": turn.conversation_id,
        "status": turn.status,
    }
    if turn.end_reason:
        body["endInterviewReason"] = turn.end_reason
    return body


# Sync endpoint: runs in the threadpool, so a client disconnect never interrupts a turn halfway
@app.post("/api/chat")
def chat(request: ChatRequest, db: Session = Depends(get_db)):
    """Start an interview, or submit the candidate's next answer."""
    if request.is_initial:
        try:
            return _turn_response(start_interview(db))
        except Exception as e:
            db.rollback()
            logger.error(f"❌ Error starting interview: {e}")
            raise HTTPException(status_code=500, detail="Error processing chat")

    if not request.conversation_id:
        raise HTTPException(status_code=400, detail="conversationId is required")
    if not request.message or not request.message.strip():
        raise HTTPException(status_code=400, detail="message must be a non-empty string")

    try:
        turn = submit_answer(db, request.conversation_id, request.message)
    except ConversationNotFoundError:
        raise HTTPException(status_code=404, detail="Conversation not found")
    except InterviewFinishedError as e:
        raise HTTPException(status_code=409, detail=f"Interview has already ended ({e.status})")
    except ConcurrentTurnError:
        raise HTTPException(status_code=409, detail="Conversation was updated concurrently, please retry")
    except GatewayFailure as e:
        return JSONResponse(
            status_code=502,
            content={
                "detail": "Language model unavailable",
                "message": e.user_message,
                "conversationId": e.conversation_id,
                "status": e.status,
            },
        )
    except Exception as e:
        logger.error(f"❌ Error in chat API: {e}")
        raise HTTPException(status_code=500, detail="Error processing chat")

    return _turn_response(turn)


@app.get("/api/interview/script")
async def get_interview_script():
    """The static interview script, in walk order."""
    return {"questions": [q.to_dict() for q in iter_script()]}


# ============================================================
# Conversations
# ============================================================

class RenameRequest(BaseModel):
    name: str


def _get_conversation_or_404(db: Session, conversation_id: str) -> DBConversation:
    conversation = db.query(DBConversation).filter(DBConversation.id == conversation_id).first()
    if not conversation:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return conversation


@app.get("/api/conversations")
def list_conversations(db: Session = Depends(get_db)):
    """List all conversations, newest first."""
    conversations = db.query(DBConversation).order_by(DBConversation.created_at.desc()).all()
    return {"conversations": [conversation_summary(c) for c in conversations]}


@app.delete("/api/conversations")
def delete_all_conversations(db: Session = Depends(get_db)):
    """Delete every conversation and message."""
    try:
        deleted_messages = db.query(DBMessage).delete(synchronize_session=False)
        deleted_conversations = db.query(DBConversation).delete(synchronize_session=False)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Error deleting all conversations: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

    logger.info(f"🗑️ Deleted {deleted_conversations} conversations and {deleted_messages} messages")
    return {"message": "All conversations deleted successfully"}


@app.get("/api/conversations/{conversation_id}")
def get_conversation(conversation_id: str, db: Session = Depends(get_db)):
    """Get a conversation's messages (oldest first) and status."""
    conversation = _get_conversation_or_404(db, conversation_id)

    messages = (
        db.query(DBMessage)
        .filter(DBMessage.conversation_id == conversation_id)
        .filter(DBMessage.content != NAME_PROBE_MESSAGE)
        .order_by(DBMessage.created_at.asc())
        .all()
    )

    return {
        "messages": [message_to_dict(m, include_conversation_id=False) for m in messages],
        "status": conversation.status,
    }


@app.delete("/api/conversations/{conversation_id}")
def delete_conversation(conversation_id: str, db: Session = Depends(get_db)):
    """Delete one conversation: its messages first, then the conversation."""
    with conversation_lock(conversation_id):
        conversation = _get_conversation_or_404(db, conversation_id)

        try:
            db.query(DBMessage).filter(DBMessage.conversation_id == conversation_id).delete(synchronize_session=False)
            db.delete(conversation)
            db.commit()
        except StaleDataError:
            db.rollback()
            raise HTTPException(status_code=409, detail="Conversation was updated concurrently, please retry")
        except Exception as e:
            db.rollback()
            logger.error(f"❌ Error deleting conversation {conversation_id}: {e}")
            raise HTTPException(status_code=500, detail="Internal server error")

    logger.info(f"🗑️ Deleted conversation: {conversation_id}")
    return {"message": "Conversation deleted successfully"}


@app.patch("/api/conversations/{conversation_id}")
def rename_conversation(conversation_id: str, rename: RenameRequest, db: Session = Depends(get_db)):
    """Set the conversation's display name."""
    with conversation_lock(conversation_id):
        conversation = _get_conversation_or_404(db, conversation_id)

        metadata = ConversationMetadata.from_json(conversation.metadata_json)
        metadata.name = rename.name
        conversation.metadata_json = metadata.to_json()

        try:
            db.commit()
        except StaleDataError:
            db.rollback()
            raise HTTPException(status_code=409, detail="Conversation was updated concurrently, please retry")
        except Exception as e:
            db.rollback()
            logger.error(f"❌ Error updating conversation {conversation_id}: {e}")
            raise HTTPException(status_code=500, detail="Error updating conversation")

    logger.info(f"📝 Renamed conversation {conversation_id} to '{rename.name}'")
    return {"success": True}


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
