"""
Skill request model tests.

Verifies envelope parsing and request / intent classification.
"""
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from kexp_skill.models import IntentName, RequestType, SkillRequestEnvelope, Speak
from skill_helpers import make_request


def test_envelope_parsing():
    payload = make_request(
        "IntentRequest",
        "Play",
        timestamp=datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc),
        request_id="amzn1.echo-api.request.abc",
    )
    envelope = SkillRequestEnvelope.model_validate(payload)

    assert envelope.request.type == "IntentRequest"
    assert envelope.request.request_id == "amzn1.echo-api.request.abc"
    assert envelope.request.timestamp == datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
    assert envelope.request.intent.name == "Play"
    assert envelope.session.session_id == "amzn1.echo-api.session.0000"
    assert envelope.session.application.application_id == "amzn1.ask.skill.kexp"
    assert envelope.request_type is RequestType.INTENT
    assert envelope.intent_name is IntentName.PLAY


def test_envelope_from_json_ignores_unknown_fields():
    raw = (
        '{"version": "1.0", "request": {"type": "LaunchRequest", "requestId": "r1",'
        ' "timestamp": "2024-05-01T12:30:00Z", "shouldLinkResultBeReturned": false}}'
    )
    envelope = SkillRequestEnvelope.model_validate_json(raw)

    assert envelope.request_type is RequestType.LAUNCH
    assert envelope.session is None


def test_envelope_requires_request():
    with pytest.raises(ValidationError):
        SkillRequestEnvelope.model_validate_json('{"version": "1.0"}')


@pytest.mark.parametrize(
    "raw_type,expected",
    [
        ("LaunchRequest", RequestType.LAUNCH),
        ("IntentRequest", RequestType.INTENT),
        ("SessionEndedRequest", RequestType.SESSION_ENDED),
        ("AudioPlayer.PlaybackStarted", RequestType.AUDIO_PLAYER),
        ("AudioPlayer.PlaybackFailed", RequestType.AUDIO_PLAYER),
        ("AudioPlayer", RequestType.UNKNOWN),
        ("launchrequest", RequestType.UNKNOWN),
        ("PlaybackController.NextCommandIssued", RequestType.UNKNOWN),
        ("", RequestType.UNKNOWN),
        (None, RequestType.UNKNOWN),
    ],
)
def test_request_type_classification(raw_type, expected):
    assert RequestType.classify(raw_type) is expected


def test_intent_name_parse():
    assert IntentName.parse("AMAZON.HelpIntent") is IntentName.HELP
    assert IntentName.parse("amazon.helpintent") is IntentName.UNRECOGNIZED
    assert IntentName.parse(None) is IntentName.UNRECOGNIZED


def test_outgoing_responses_are_immutable():
    speak = Speak("hello")
    with pytest.raises(AttributeError):
        speak.text = "changed"
