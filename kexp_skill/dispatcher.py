"""
Intent dispatch.

Maps a verified skill request to exactly one OutgoingResponse. Pure: no I/O,
no logging, no shared state. The server does the logging around it.
"""
from typing import assert_never

from .models import (
    AudioAction,
    AudioDirective,
    Empty,
    IntentName,
    LIVE_STREAM,
    LiveStream,
    OutgoingResponse,
    PlayBehavior,
    RequestType,
    SkillRequestEnvelope,
    Speak,
    Unhandled,
)

WELCOME_TEXT = "Welcome to KEXP 90.3FM"
HELP_TEXT = "Say PLAY to play the KEXP live stream"
NEXT_PREVIOUS_UNSUPPORTED = "Sorry, Next and Previous are not supported."
LOOP_UNSUPPORTED = "Sorry, looping is not supported."
SHUFFLE_UNSUPPORTED = "Sorry, shuffle is not supported."
REPEAT_UNSUPPORTED = "Sorry, Repeat is not supported."


def dispatch(
    request: SkillRequestEnvelope,
    stream: LiveStream = LIVE_STREAM,
) -> OutgoingResponse:
    """Classify the request and build its response. Never raises."""
    request_type = request.request_type
    match request_type:
        case RequestType.LAUNCH:
            return Speak(WELCOME_TEXT, keep_session_open=True)
        case RequestType.INTENT:
            return dispatch_intent(request.intent_name, stream)
        case RequestType.AUDIO_PLAYER:
            # Playback progress events need no action, only an acknowledgement.
            return Empty(end_session=False)
        case RequestType.SESSION_ENDED:
            return Empty(end_session=True)
        case RequestType.UNKNOWN:
            return Unhandled()
        case _:
            assert_never(request_type)


def dispatch_intent(intent: IntentName, stream: LiveStream = LIVE_STREAM) -> OutgoingResponse:
    match intent:
        case IntentName.PLAY | IntentName.RESUME | IntentName.START_OVER:
            return AudioDirective(
                AudioAction.PLAY,
                stream_url=stream.url,
                token=stream.token,
                play_behavior=PlayBehavior.REPLACE_ALL,
            )
        case IntentName.CANCEL | IntentName.PAUSE | IntentName.STOP:
            return AudioDirective(AudioAction.STOP)
        case IntentName.HELP:
            return Speak(HELP_TEXT, keep_session_open=True)
        case IntentName.NEXT | IntentName.PREVIOUS:
            return Speak(NEXT_PREVIOUS_UNSUPPORTED)
        case IntentName.LOOP_ON | IntentName.LOOP_OFF:
            return Speak(LOOP_UNSUPPORTED)
        case IntentName.SHUFFLE_ON | IntentName.SHUFFLE_OFF:
            return Speak(SHUFFLE_UNSUPPORTED)
        case IntentName.REPEAT:
            return Speak(REPEAT_UNSUPPORTED)
        case IntentName.UNRECOGNIZED:
            return Unhandled()
        case _:
            assert_never(intent)
