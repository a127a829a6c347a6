"""OpenAI chat-completion gateway for the interviewer."""
import json
import re
import logging
from typing import Dict, List, NamedTuple, Optional, Tuple

import openai
from openai import OpenAI

from chat_backend import config
from chat_backend.services.interview_prompts import (
    END_INTERVIEW_TOOL,
    END_REASON_COMPLETED,
    END_REASON_ERROR,
    INTERVIEW_SYSTEM_PROMPT,
    INTERVIEW_TOOLS,
    MARK_QUESTION_COMPLETE_TOOL,
)

logger = logging.getLogger(__name__)

GENERIC_FALLBACK_MESSAGE = "I apologize, but I'm having trouble processing your response. Could you please try again?"
AUTH_FALLBACK_MESSAGE = "Authentication error. Please check the API key configuration."
NOT_CONFIGURED_FALLBACK_MESSAGE = "I apologize, but I'm not properly configured at the moment."

# Markers the model sometimes prints instead of calling the tool
END_MARKER_PATTERN = re.compile(r"\(end_interview\(.*?\)\)|\[End of interview\]")


class LLMServiceError(Exception):
    """The completion could not be produced. ``user_message`` is safe to show the candidate."""

    def __init__(self, message: str, user_message: str = GENERIC_FALLBACK_MESSAGE):
        super().__init__(message)
        self.user_message = user_message


class LLMConfigurationError(LLMServiceError):
    def __init__(self, message: str):
        super().__init__(message, NOT_CONFIGURED_FALLBACK_MESSAGE)


class LLMAuthenticationError(LLMServiceError):
    def __init__(self, message: str):
        super().__init__(message, AUTH_FALLBACK_MESSAGE)


class LLMTimeoutError(LLMServiceError):
    pass


class LLMReply(NamedTuple):
    text: str
    end_interview_reason: Optional[str] = None
    completed_questions: Tuple[str, ...] = ()


_client: Optional[OpenAI] = None


def get_client() -> OpenAI:
    """Create the OpenAI client on first use."""
    global _client
    if _client is None:
        if not config.OPENAI_API_KEY:
            logger.error("❌ OPENAI_API_KEY not set. Set it in your .env file.")
            raise LLMConfigurationError("OpenAI API key not configured")
        _client = OpenAI(
            api_key=config.OPENAI_API_KEY,
            timeout=config.LLM_TIMEOUT_SECONDS,
            max_retries=config.LLM_MAX_RETRIES,
        )
    return _client


def clean_response(text: Optional[str]) -> str:
    """Remove printed end-of-interview markers from the reply."""
    return END_MARKER_PATTERN.sub("", text or "").strip()


def _tool_arguments(tool_call) -> Optional[dict]:
    try:
        args = json.loads(tool_call.function.arguments or "{}")
    except (TypeError, ValueError) as e:
        logger.error(f"Error parsing {tool_call.function.name} arguments: {e}")
        return None
    return args if isinstance(args, dict) else None


def parse_completion_message(message) -> LLMReply:
    """
    Turn a chat-completion message into an LLMReply.

    An end_interview call without a reason means "completed"; one whose
    arguments cannot be parsed still ends the interview, with reason "error".
    """
    end_reason = None
    completed_questions = []

    for tool_call in message.tool_calls or []:
        name = getattr(tool_call.function, "name", None)
        if name == END_INTERVIEW_TOOL and end_reason is None:
            args = _tool_arguments(tool_call)
            if args is None:
                end_reason = END_REASON_ERROR
            else:
                end_reason = args.get("reason") or END_REASON_COMPLETED
            logger.info(f"🛑 LLM requested end of interview (reason: {end_reason})")
        elif name == MARK_QUESTION_COMPLETE_TOOL:
            args = _tool_arguments(tool_call)
            question_id = args.get("question_id") if args else None
            if isinstance(question_id, str) and question_id:
                completed_questions.append(question_id)

    return LLMReply(
        text=clean_response(message.content),
        end_interview_reason=end_reason,
        completed_questions=tuple(completed_questions),
    )


def generate_response(
    conversation_history: List[Dict[str, str]],
    model_id: Optional[str] = None
) -> LLMReply:
    """
    Generate the interviewer's next turn.

    Args:
        conversation_history: Ordered messages [{"role": "user"/"assistant", "content": "..."}]
        model_id: The model to use (defaults to config)

    Returns:
        LLMReply with the cleaned text and any structured directives

    Raises:
        LLMServiceError: on configuration, authentication, timeout or API failures
    """
    if model_id is None:
        model_id = config.LLM_MODEL

    client = get_client()

    messages = [{"role": "system", "content": INTERVIEW_SYSTEM_PROMPT}]
    for msg in conversation_history:
        role = "assistant" if msg["role"] == "assistant" else "user"
        messages.append({"role": role, "content": msg["content"]})

    logger.info(f"🤖 LLM: Using model '{model_id}' with {len(conversation_history)} history messages")

    try:
        response = client.chat.completions.create(
            model=model_id,
            messages=messages,
            tools=INTERVIEW_TOOLS,
            tool_choice="auto",
            temperature=config.LLM_TEMPERATURE,
            max_tokens=config.LLM_MAX_TOKENS,
        )
    except openai.AuthenticationError as e:
        logger.error("❌ Invalid OpenAI API key. Please check OPENAI_API_KEY in your .env file.")
        raise LLMAuthenticationError(str(e)) from e
    except openai.APITimeoutError as e:
        logger.error(f"❌ OpenAI request timed out after {config.LLM_TIMEOUT_SECONDS}s")
        raise LLMTimeoutError(str(e)) from e
    except openai.OpenAIError as e:
        logger.error(f"❌ OpenAI API error: {e}")
        raise LLMServiceError(str(e)) from e

    if not response.choices or response.choices[0].message is None:
        raise LLMServiceError("No response from OpenAI")

    reply = parse_completion_message(response.choices[0].message)
    logger.info(f"🤖 LLM: Generated response: '{reply.text[:50]}...'" if len(reply.text) > 50 else f"🤖 LLM: Generated response: '{reply.text}'")
    return reply
