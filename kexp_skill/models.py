"""
Skill request and response domain types.

Incoming: pydantic models of the Alexa request envelope (only the fields the
skill reads; anything else in the payload is ignored).

Outgoing: a closed set of frozen response variants. The dispatcher produces
exactly one per request and the renderer turns it into wire JSON.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .config import DEFAULT_STREAM_TOKEN, DEFAULT_STREAM_URL


class RequestType(str, Enum):
    """Request-type discriminant, collapsed to the kinds the skill handles."""

    LAUNCH = "LaunchRequest"
    INTENT = "IntentRequest"
    AUDIO_PLAYER = "AudioPlayer"
    SESSION_ENDED = "SessionEndedRequest"
    UNKNOWN = "Unknown"

    @classmethod
    def classify(cls, raw_type: Optional[str]) -> "RequestType":
        if raw_type == cls.LAUNCH.value:
            return cls.LAUNCH
        if raw_type == cls.INTENT.value:
            return cls.INTENT
        if raw_type == cls.SESSION_ENDED.value:
            return cls.SESSION_ENDED
        if raw_type and raw_type.startswith("AudioPlayer."):
            return cls.AUDIO_PLAYER
        return cls.UNKNOWN


class IntentName(str, Enum):
    """Intents the skill knows about. Lookup is exact and case-sensitive."""

    PLAY = "Play"
    RESUME = "AMAZON.ResumeIntent"
    START_OVER = "AMAZON.StartOverIntent"
    CANCEL = "AMAZON.CancelIntent"
    HELP = "AMAZON.HelpIntent"
    PAUSE = "AMAZON.PauseIntent"
    STOP = "AMAZON.StopIntent"
    NEXT = "AMAZON.NextIntent"
    PREVIOUS = "AMAZON.PreviousIntent"
    LOOP_ON = "AMAZON.LoopOnIntent"
    LOOP_OFF = "AMAZON.LoopOffIntent"
    SHUFFLE_ON = "AMAZON.ShuffleOnIntent"
    SHUFFLE_OFF = "AMAZON.ShuffleOffIntent"
    REPEAT = "AMAZON.RepeatIntent"
    UNRECOGNIZED = "<unrecognized>"

    @classmethod
    def parse(cls, raw_name: Optional[str]) -> "IntentName":
        if not raw_name or raw_name == cls.UNRECOGNIZED.value:
            return cls.UNRECOGNIZED
        try:
            return cls(raw_name)
        except ValueError:
            return cls.UNRECOGNIZED


class _AlexaModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class Intent(_AlexaModel):
    name: str
    slots: Dict[str, Any] = Field(default_factory=dict)


class SkillRequestBody(_AlexaModel):
    """The `request` object of the envelope."""

    type: str
    request_id: Optional[str] = None
    timestamp: Optional[datetime] = None
    locale: Optional[str] = None
    intent: Optional[Intent] = None

    # AudioPlayer.* events
    token: Optional[str] = None
    offset_in_milliseconds: Optional[int] = None

    # SessionEndedRequest
    reason: Optional[str] = None


class Application(_AlexaModel):
    application_id: Optional[str] = None


class SkillSession(_AlexaModel):
    session_id: Optional[str] = None
    new: bool = False
    application: Optional[Application] = None


class SkillRequestEnvelope(_AlexaModel):
    """Full Alexa request envelope."""

    version: str = "1.0"
    session: Optional[SkillSession] = None
    context: Dict[str, Any] = Field(default_factory=dict)
    request: SkillRequestBody

    @property
    def request_type(self) -> RequestType:
        return RequestType.classify(self.request.type)

    @property
    def intent_name(self) -> IntentName:
        if self.request.intent is None:
            return IntentName.UNRECOGNIZED
        return IntentName.parse(self.request.intent.name)


# --- Outgoing responses ---


class AudioAction(str, Enum):
    PLAY = "play"
    STOP = "stop"


class PlayBehavior(str, Enum):
    REPLACE_ALL = "REPLACE_ALL"


@dataclass(frozen=True)
class LiveStream:
    url: str = DEFAULT_STREAM_URL
    token: str = DEFAULT_STREAM_TOKEN


LIVE_STREAM = LiveStream()


@dataclass(frozen=True)
class Speak:
    text: str
    keep_session_open: bool = False


@dataclass(frozen=True)
class AudioDirective:
    action: AudioAction
    stream_url: Optional[str] = None
    token: Optional[str] = None
    play_behavior: Optional[PlayBehavior] = None


@dataclass(frozen=True)
class Empty:
    end_session: bool


@dataclass(frozen=True)
class Unhandled:
    """Nothing useful to say. Still answered with HTTP 200."""


OutgoingResponse = Union[Speak, AudioDirective, Empty, Unhandled]
