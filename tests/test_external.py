import threading

import pytest

from fluency_assessor.errors import ExternalCorrectionWarning
from fluency_assessor.external import coerce_payload, fetch_with_timeout, parse_json_reply, parse_labelled_reply


def test_labelled_reply():
    ext = parse_labelled_reply("Corrected: I'm fine, thanks.\nReply: Glad to hear it!")
    assert ext.corrected_text == "I'm fine, thanks."
    assert ext.reply == "Glad to hear it!"


def test_labelled_reply_partial_and_missing():
    ext = parse_labelled_reply("reply: Tell me more.")
    assert ext.corrected_text is None and ext.reply == "Tell me more."
    assert parse_labelled_reply("just chatting") is None
    assert parse_labelled_reply(None) is None


def test_json_reply_with_fence():
    raw = '```json\n{"correctedText": "Hi there.", "scoreHints": {"grammarScore": 80}, "encouragement": "Nice!"}\n```'
    ext = parse_json_reply(raw)
    assert ext.corrected_text == "Hi there."
    assert ext.score_hints.grammar == 80
    assert ext.explanation == "Nice!"


def test_json_reply_invalid():
    with pytest.warns(ExternalCorrectionWarning):
        assert parse_json_reply("{not json") is None
    with pytest.warns(ExternalCorrectionWarning):
        assert parse_json_reply("[1, 2]") is None


def test_coerce_payload_dispatch():
    assert coerce_payload('{"corrected": "Yes."}').corrected_text == "Yes."
    assert coerce_payload("Corrected: Yes.").corrected_text == "Yes."
    assert coerce_payload({"correctedText": "Yes."}).corrected_text == "Yes."
    assert coerce_payload(None) is None


def test_fetch_success():
    ext = fetch_with_timeout(lambda text: {"correctedText": text.upper()}, "hi", timeout_s=5)
    assert ext.corrected_text == "HI"


def test_fetch_failure_becomes_absent():
    def fail(_text):
        raise ConnectionError("offline")

    with pytest.warns(ExternalCorrectionWarning, match="offline"):
        assert fetch_with_timeout(fail, "hi", timeout_s=5) is None


def test_fetch_timeout_becomes_absent():
    release = threading.Event()

    def slow(_text):
        release.wait(5)
        return {"correctedText": "late"}

    try:
        with pytest.warns(ExternalCorrectionWarning, match="timed out"):
            assert fetch_with_timeout(slow, "hi", timeout_s=0.05) is None
    finally:
        release.set()
