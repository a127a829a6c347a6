import json

from chat_backend.config import NAME_PROBE_MESSAGE
from chat_backend.models.db_models import Conversation, Message
from chat_backend.services.gpt_llm import LLMReply, LLMServiceError, LLMTimeoutError, GENERIC_FALLBACK_MESSAGE

OPENING_QUESTION = "Hi! Are you interested in discussing a Full Stack role?"


def send(client, conversation_id, message):
    return client.post("/api/chat", json={"message": message, "conversationId": conversation_id})


def test_health(client):
    assert client.get("/api/health").json() == {"status": "healthy"}


def test_start_interview_returns_opening_question(client, fake_llm):
    response = client.post("/api/chat", json={"isInitial": True})

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "in_progress"
    assert len(body["messages"]) == 1
    assert body["messages"][0]["role"] == "assistant"
    assert body["messages"][0]["content"] == OPENING_QUESTION
    assert body["messages"][0]["conversationId"] == body["conversationId"]
    assert "endInterviewReason" not in body
    assert fake_llm.calls == []


def test_answer_turn_returns_user_and_assistant_messages(client, fake_llm, started):
    fake_llm.queue(LLMReply("Great! Could you please share your name to start?"))

    response = send(client, started, "Yes")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "in_progress"
    assert [m["role"] for m in body["messages"]] == ["user", "assistant"]
    assert body["messages"][0]["content"] == "Yes"
    assert fake_llm.calls[0] == [
        {"role": "assistant", "content": OPENING_QUESTION},
        {"role": "user", "content": "Yes"},
    ]


def test_not_interested_phrase_completes_interview(client, fake_llm, started):
    fake_llm.queue(LLMReply("Sure, happy to. Would you be interested in learning more?"))
    send(client, started, "Hello")
    fake_llm.queue(LLMReply("Thank you for your time! If you ever change your mind, feel free to reach out."))

    body = send(client, started, "No").json()

    assert body["status"] == "completed"
    assert body["endInterviewReason"] == "not_interested"
    assert client.get(f"/api/conversations/{started}").json()["status"] == "completed"


def test_structured_reason_wins(client, fake_llm, started):
    fake_llm.queue(LLMReply("I understand, best of luck!", end_interview_reason="salary_mismatch"))

    body = send(client, started, "I need 200k").json()

    assert body["status"] == "completed"
    assert body["endInterviewReason"] == "salary_mismatch"


def test_directive_without_text_persists_only_user_message(client, fake_llm, started):
    fake_llm.queue(LLMReply("", end_interview_reason="completed"))

    body = send(client, started, "No questions, thanks").json()

    assert body["status"] == "completed"
    assert [m["role"] for m in body["messages"]] == ["user"]


def test_finished_interview_rejects_further_answers(client, fake_llm, started, db):
    fake_llm.queue(LLMReply("Thanks again for your time, we'll be in touch soon."))
    send(client, started, "No questions")
    count_before = db.query(Message).filter(Message.conversation_id == started).count()

    response = send(client, started, "Wait, one more thing")

    assert response.status_code == 409
    assert db.query(Message).filter(Message.conversation_id == started).count() == count_before
    assert len(fake_llm.calls) == 1


def test_gateway_failure_keeps_user_message_and_status(client, fake_llm, started, db):
    fake_llm.queue(LLMTimeoutError("timed out"))

    response = send(client, started, "Yes")

    assert response.status_code == 502
    body = response.json()
    assert body["message"] == GENERIC_FALLBACK_MESSAGE
    assert body["status"] == "in_progress"
    assert body["conversationId"] == started
    history = client.get(f"/api/conversations/{started}").json()
    assert history["status"] == "in_progress"
    assert [m["content"] for m in history["messages"]] == [OPENING_QUESTION, "Yes"]


def test_interview_continues_after_gateway_failure(client, fake_llm, started):
    fake_llm.queue(LLMServiceError("boom"), LLMReply("Could you please share your name?"))
    send(client, started, "Yes")

    response = send(client, started, "Yes!")

    assert response.status_code == 200
    assert fake_llm.calls[1][-2:] == [
        {"role": "user", "content": "Yes"},
        {"role": "user", "content": "Yes!"},
    ]


def test_empty_reply_without_directive_stays_in_progress(client, fake_llm, started):
    fake_llm.queue(LLMReply(""))

    body = send(client, started, "Yes").json()

    assert body["status"] == "in_progress"
    assert len(body["messages"]) == 1


def test_completed_questions_are_recorded_in_metadata(client, fake_llm, started, db):
    fake_llm.queue(LLMReply("Nice to meet you, Alex!", completed_questions=("name",)))

    send(client, started, "Alex")

    conversation = db.query(Conversation).filter(Conversation.id == started).first()
    assert json.loads(conversation.metadata_json)["completedQuestions"] == ["name"]


def test_missing_conversation_id_is_rejected(client, fake_llm):
    response = client.post("/api/chat", json={"message": "Yes"})
    assert response.status_code == 400
    assert fake_llm.calls == []


def test_blank_message_is_rejected(client, started, db):
    response = send(client, started, "   ")
    assert response.status_code == 400
    assert db.query(Message).filter(Message.conversation_id == started).count() == 1


def test_unknown_conversation_is_not_found(client):
    assert send(client, "doesnotexist", "Yes").status_code == 404


def test_chat_only_accepts_post(client):
    assert client.get("/api/chat").status_code == 405


def test_history_is_ordered_and_hides_name_probe(client, fake_llm, started, db):
    db.add(Message(conversation_id=started, role="assistant", content=NAME_PROBE_MESSAGE))
    db.commit()
    for answer in ["Yes", "Alex", "No"]:
        send(client, started, answer)

    messages = client.get(f"/api/conversations/{started}").json()["messages"]

    assert NAME_PROBE_MESSAGE not in [m["content"] for m in messages]
    assert [m["role"] for m in messages] == ["assistant"] + ["user", "assistant"] * 3
    timestamps = [m["createdAt"] for m in messages]
    assert timestamps == sorted(timestamps)


def test_get_unknown_conversation(client):
    assert client.get("/api/conversations/nope").status_code == 404


def test_list_conversations_newest_first(client):
    first = client.post("/api/chat", json={"isInitial": True}).json()["conversationId"]
    second = client.post("/api/chat", json={"isInitial": True}).json()["conversationId"]

    conversations = client.get("/api/conversations").json()["conversations"]

    assert [c["id"] for c in conversations] == [second, first]
    assert conversations[0]["status"] == "in_progress"
    assert isinstance(conversations[0]["metadata"]["sessionNumber"], int)
    assert conversations[0]["messages"][0]["content"] == OPENING_QUESTION


def test_rename_then_list_shows_name(client, started):
    response = client.patch(f"/api/conversations/{started}", json={"name": "Alex"})
    assert response.json() == {"success": True}

    conversations = client.get("/api/conversations").json()["conversations"]
    assert conversations[0]["metadata"]["name"] == "Alex"
    assert "sessionNumber" in conversations[0]["metadata"]


def test_rename_tolerates_malformed_metadata(client, started, db):
    conversation = db.query(Conversation).filter(Conversation.id == started).first()
    conversation.metadata_json = "{broken"
    db.commit()

    assert client.patch(f"/api/conversations/{started}", json={"name": "Sam"}).status_code == 200
    assert client.get("/api/conversations").json()["conversations"][0]["metadata"] == {"name": "Sam"}


def test_rename_unknown_conversation(client):
    assert client.patch("/api/conversations/nope", json={"name": "Alex"}).status_code == 404


def test_rename_requires_name(client, started):
    assert client.patch(f"/api/conversations/{started}", json={}).status_code == 422


def test_delete_conversation_removes_messages(client, fake_llm, started, db):
    send(client, started, "Yes")

    assert client.delete(f"/api/conversations/{started}").status_code == 200

    assert client.get(f"/api/conversations/{started}").status_code == 404
    assert db.query(Message).filter(Message.conversation_id == started).count() == 0


def test_delete_unknown_conversation_is_not_found(client):
    assert client.delete("/api/conversations/nope").status_code == 404


def test_delete_all_conversations(client, fake_llm, db):
    for _ in range(2):
        conversation_id = client.post("/api/chat", json={"isInitial": True}).json()["conversationId"]
        send(client, conversation_id, "Yes")

    assert client.delete("/api/conversations").status_code == 200

    assert client.get("/api/conversations").json() == {"conversations": []}
    assert db.query(Message).count() == 0


def test_interview_script_endpoint(client):
    questions = client.get("/api/interview/script").json()["questions"]
    assert questions[0]["text"] == OPENING_QUESTION
    assert questions[-1]["nextQuestion"] is None
