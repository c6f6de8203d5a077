from fluency_assessor.session import (
    REPLIES,
    ConversationSession,
    conversation_turn,
    encouragement,
    format_coach_message,
)


def test_replies_rotate_per_topic():
    s = ConversationSession()
    beginner = REPLIES["beginner"]
    assert s.next_reply("beginner") == beginner[0]
    assert s.next_reply("beginner") == beginner[1]
    assert s.next_reply("advanced") == REPLIES["advanced"][0]
    for _ in range(len(beginner) - 2):
        s.next_reply("beginner")
    assert s.next_reply("beginner") == beginner[0]


def test_sessions_are_independent():
    a = ConversationSession()
    b = ConversationSession()
    a.next_reply("continuation")
    assert b.next_reply("continuation") == REPLIES["continuation"][0]


def test_clean_turn_continues_conversation():
    s = ConversationSession(level="beginner")
    turn = conversation_turn(s, "She goes to school on Monday.")
    assert turn.correction.errors == []
    assert turn.reply == REPLIES["continuation"][0]
    assert format_coach_message(turn) == turn.reply


def test_turn_with_errors_uses_level_replies():
    s = ConversationSession(level="advanced")
    turn = conversation_turn(s, "Im going to the store")
    assert turn.reply == REPLIES["advanced"][0]
    assert turn.encouragement.startswith("You're close!")

    message = format_coach_message(turn)
    assert 'Instead of "Im", we typically say "I\'m".' in message
    assert "Person B (you): I'm going to the store" in message
    assert message.endswith("Your turn!")


def test_external_reply_wins():
    s = ConversationSession()
    turn = conversation_turn(s, "Im tired", {"correctedText": "I'm tired.", "conversationReply": "Get some rest!"})
    assert turn.reply == "Get some rest!"
    assert turn.correction.corrected == "I'm tired."


def test_encouragement_bands():
    assert encouragement([]).startswith("Perfect!")
