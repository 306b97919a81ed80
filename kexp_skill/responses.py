"""Alexa response envelope models and rendering of OutgoingResponse variants."""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union, assert_never

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .models import (
    AudioAction,
    AudioDirective,
    Empty,
    OutgoingResponse,
    PlayBehavior,
    Speak,
    Unhandled,
)


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OutputSpeech(_WireModel):
    type: Literal["PlainText"] = "PlainText"
    text: str


class Stream(_WireModel):
    url: str
    token: str
    offset_in_milliseconds: int = 0


class AudioItem(_WireModel):
    stream: Stream


class AudioPlayerPlay(_WireModel):
    type: Literal["AudioPlayer.Play"] = "AudioPlayer.Play"
    play_behavior: PlayBehavior
    audio_item: AudioItem


class AudioPlayerStop(_WireModel):
    type: Literal["AudioPlayer.Stop"] = "AudioPlayer.Stop"


Directive = Union[AudioPlayerPlay, AudioPlayerStop]


class ResponseBody(_WireModel):
    output_speech: Optional[OutputSpeech] = None
    directives: Optional[List[Directive]] = None
    should_end_session: Optional[bool] = None


class SkillResponse(_WireModel):
    version: str = "1.0"
    response: ResponseBody

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


def render(outgoing: OutgoingResponse) -> Optional[SkillResponse]:
    """Build the wire response. Unhandled renders to None (a JSON null body)."""
    match outgoing:
        case Speak(text=text, keep_session_open=keep_open):
            body = ResponseBody(
                output_speech=OutputSpeech(text=text),
                should_end_session=not keep_open,
            )
        case AudioDirective():
            body = ResponseBody(
                directives=[_audio_directive(outgoing)],
                should_end_session=True,
            )
        case Empty(end_session=end_session):
            body = ResponseBody(should_end_session=end_session)
        case Unhandled():
            return None
        case _:
            assert_never(outgoing)
    return SkillResponse(response=body)


def _audio_directive(outgoing: AudioDirective) -> Directive:
    match outgoing.action:
        case AudioAction.STOP:
            return AudioPlayerStop()
        case AudioAction.PLAY:
            if not outgoing.stream_url or not outgoing.token:
                raise ValueError("Play directive requires a stream URL and token")
            return AudioPlayerPlay(
                play_behavior=outgoing.play_behavior or PlayBehavior.REPLACE_ALL,
                audio_item=AudioItem(
                    stream=Stream(url=outgoing.stream_url, token=outgoing.token),
                ),
            )
        case _:
            assert_never(outgoing.action)
