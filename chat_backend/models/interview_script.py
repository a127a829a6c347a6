"""Static interview script: ordered questions and their links."""
from typing import Any, Callable, Dict, Iterator, List, Optional
import logging

logger = logging.getLogger(__name__)

QUESTION_TYPE_TEXT = "text"
QUESTION_TYPE_CHOICE = "choice"

INITIAL_QUESTION_ID = "initial"


class InterviewQuestion:
    """One entry of the interview script."""

    def __init__(
        self,
        question_id: str,
        text: str,
        question_type: str = QUESTION_TYPE_TEXT,
        next_question: Optional[str] = None,
        choices: Optional[List[str]] = None,
        on_complete: Optional[Callable[[str], None]] = None
    ):
        """
        Args:
            question_id: Unique identifier for the question
            text: The question text shown to the candidate
            question_type: "text" or "choice"
            next_question: ID of the next question, or None if last
            choices: Accepted literal answers for "choice" questions
            on_complete: Called with the conversation id when an interview ends on this entry
        """
        if question_type not in (QUESTION_TYPE_TEXT, QUESTION_TYPE_CHOICE):
            raise ValueError(f"Unknown question type: {question_type}")
        if choices is not None and not choices:
            raise ValueError(f"Question '{question_id}' has an empty choice list")
        self.id = question_id
        self.text = text
        self.type = question_type
        self.next_question = next_question
        self.choices = list(choices) if choices else None
        self.on_complete = on_complete

    @property
    def is_terminal(self) -> bool:
        return self.next_question is None

    def complete(self, conversation_id: str):
        """Run the completion side effect, if any."""
        if self.on_complete:
            self.on_complete(conversation_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "type": self.type,
            "choices": self.choices,
            "nextQuestion": self.next_question,
        }


def _log_interview_end(conversation_id: str):
    logger.info(f"🏁 Interview has ended for conversation {conversation_id}")


INTERVIEW_SCRIPT: Dict[str, InterviewQuestion] = {
    q.id: q for q in [
        InterviewQuestion(
            "initial",
            "Hi! Are you interested in discussing a Full Stack role?",
            next_question="greeting",
        ),
        InterviewQuestion(
            "greeting",
            "Would you be interested in learning more about this Full Stack role?",
            QUESTION_TYPE_CHOICE,
            next_question="name",
            choices=["Yes", "No"],
        ),
        InterviewQuestion(
            "name",
            "Can I get your name, please?",
            next_question="background",
        ),
        InterviewQuestion(
            "background",
            "Do you hold a Bachelor's degree or higher in Computer Science?",
            QUESTION_TYPE_CHOICE,
            next_question="experience",
            choices=["Yes", "No"],
        ),
        InterviewQuestion(
            "experience",
            "Do you have at least 2 years of work experience in full-stack development?",
            next_question="tech_stack",
        ),
        InterviewQuestion(
            "tech_stack",
            "Which programming languages are you most comfortable with?",
            next_question="recent_project",
        ),
        InterviewQuestion(
            "recent_project",
            "Tell me about your most recent project. What was your role and what technologies did you use?",
            next_question="salary",
        ),
        InterviewQuestion(
            "salary",
            "Our salary range is $100,000-$130,000. Does this align with your expectations?",
            QUESTION_TYPE_CHOICE,
            next_question="availability",
            choices=["Yes", "No"],
        ),
        InterviewQuestion(
            "availability",
            "If selected, when would you be able to start?",
            next_question="end",
        ),
        InterviewQuestion(
            "end",
            "Thank you for your time. We'll review your application and get back to you soon.",
            next_question=None,
            on_complete=_log_interview_end,
        ),
    ]
}


def validate_script(script: Dict[str, InterviewQuestion]) -> List[str]:
    """
    Check the script's shape and return its walk order.

    Exactly one entry may be terminal, links from the initial entry must
    reach it without cycles, and every entry must be on that path.

    Raises:
        ValueError: if any of the above does not hold
    """
    terminals = [q.id for q in script.values() if q.is_terminal]
    if len(terminals) != 1:
        raise ValueError(f"Script must have exactly one terminal question, found {terminals}")
    if INITIAL_QUESTION_ID not in script:
        raise ValueError(f"Script has no '{INITIAL_QUESTION_ID}' question")

    order = []
    seen = set()
    current: Optional[str] = INITIAL_QUESTION_ID
    while current is not None:
        if current in seen:
            raise ValueError(f"Script has a cycle at '{current}'")
        if current not in script:
            raise ValueError(f"Script links to unknown question '{current}'")
        seen.add(current)
        order.append(current)
        current = script[current].next_question

    unreachable = set(script) - seen
    if unreachable:
        raise ValueError(f"Questions not reachable from '{INITIAL_QUESTION_ID}': {sorted(unreachable)}")
    return order


SCRIPT_ORDER = validate_script(INTERVIEW_SCRIPT)


def get_question(question_id: str) -> InterviewQuestion:
    """Get a question by ID. Raises KeyError for unknown ids."""
    return INTERVIEW_SCRIPT[question_id]


def get_initial_question() -> InterviewQuestion:
    return INTERVIEW_SCRIPT[INITIAL_QUESTION_ID]


def get_terminal_question() -> InterviewQuestion:
    return INTERVIEW_SCRIPT[SCRIPT_ORDER[-1]]


def iter_script() -> Iterator[InterviewQuestion]:
    """Questions in the order an interview walks them."""
    for question_id in SCRIPT_ORDER:
        yield INTERVIEW_SCRIPT[question_id]


def get_next_question(question_id: str) -> Optional[InterviewQuestion]:
    """The question after ``question_id``, or None after the terminal one."""
    next_id = get_question(question_id).next_question
    return INTERVIEW_SCRIPT[next_id] if next_id else None


def validate_answer(question_id: str, answer: str) -> bool:
    """
    Validate the candidate's answer for a given question.

    Choice questions accept any listed choice, case-insensitively.
    Text questions accept any non-blank answer.
    """
    question = get_question(question_id)
    answer = (answer or "").strip()

    if question.type == QUESTION_TYPE_CHOICE and question.choices:
        return answer.lower() in [c.lower() for c in question.choices]

    return len(answer) > 0


def get_current_question(questions_asked: int) -> InterviewQuestion:
    """
    The question the next answer responds to, given how many interviewer
    messages are stored. The opening question is the first; past the end
    stays on the terminal question.
    """
    index = min(max(questions_asked - 1, 0), len(SCRIPT_ORDER) - 1)
    return INTERVIEW_SCRIPT[SCRIPT_ORDER[index]]


def _parse_int(value: str) -> Optional[int]:
    digits = "".join(ch for ch in value if ch.isdigit())
    return int(digits) if digits else None


def process_user_response(metadata: Dict[str, Any], question_id: str, answer: str) -> Dict[str, Any]:
    """
    Return a copy of ``metadata`` with the answer recorded under its field.
    Questions without a mapped field leave the map unchanged.
    """
    new_metadata = dict(metadata)
    answer = answer.strip()

    if question_id == "position":
        new_metadata["position"] = answer
    elif question_id in ("salary", "experience"):
        number = _parse_int(answer)
        if number is not None:
            new_metadata[question_id] = number
    elif question_id in ("education", "background"):
        new_metadata["education"] = answer
    elif question_id in ("skills", "tech_stack"):
        new_metadata["skills"] = [skill.strip() for skill in answer.split(",") if skill.strip()]
    elif question_id == "availability":
        new_metadata["availability"] = answer

    return new_metadata
