"""Conversion of backend entities into the structures the views display."""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Union


class EventState(enum.IntEnum):
    SIGNING_UP = 0
    ACTIVE = 1
    COMPLETED = 2
    CANCELLED = 3


@dataclass
class EventEntity:
    id: int
    summary: str
    start: str
    end: str
    description: str = ""
    location: Optional[str] = None
    lark_meeting_room_name: Optional[str] = None
    tag: str = ""
    lark_department_name: str = ""
    state: int = EventState.SIGNING_UP
    is_subscribed: bool = False
    is_checked_in: bool = False


@dataclass
class FeedbackEntity:
    rating: int
    feedback: Optional[str] = None


@dataclass
class EventStruct:
    id: int
    summary: str
    summary_abbr: str
    description: str
    time: str
    location: str
    tag: str
    lark_department_name: str
    state: EventState
    is_subscribed: bool
    is_check_in: bool


@dataclass
class FeedbackStruct:
    success: bool = False
    has_feedbacked: bool = False
    rate: int = 0
    content: str = ""


@dataclass
class ContributorStruct:
    avatar: Optional[Path]
    html_url: str


def parse_iso8601_utc(text: str) -> int:
    """Parse an ISO 8601 timestamp into seconds since the epoch (UTC if no offset)."""
    normalized = text.strip()
    if normalized.endswith(("Z", "z")):
        normalized = normalized[:-1] + "+00:00"
    moment = datetime.fromisoformat(normalized)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp())


def _short(moment: time.struct_time) -> str:
    return f"{moment.tm_mon:02}.{moment.tm_mday:02} {moment.tm_hour:02}:{moment.tm_min:02}"


def convert_time_range(start: str, end: str) -> str:
    """Render a start/end pair compactly, omitting parts both ends share."""
    start_date = time.gmtime(parse_iso8601_utc(start))
    end_date = time.gmtime(parse_iso8601_utc(end))
    start_text = _short(start_date)
    end_text = _short(end_date)

    if start_date.tm_year != end_date.tm_year:
        return f"{start_date.tm_year:04} {start_text} - {end_date.tm_year:04} {end_text}"
    if start_date.tm_mon != end_date.tm_mon or start_date.tm_mday != end_date.tm_mday:
        return f"{start_text} - {end_text}"
    return f"{start_text} - {end_text[6:]}"


def _utf8_length(lead: int) -> int:
    if lead & 0x80 == 0:
        return 1
    if lead & 0xE0 == 0xC0:
        return 2
    if lead & 0xF0 == 0xE0:
        return 3
    if lead & 0xF8 == 0xF0:
        return 4
    return 0


def first_unicode(text: Union[str, bytes]) -> str:
    """Return the first character of ``text``, or a space if there is none."""
    if not text:
        return " "
    if isinstance(text, str):
        return text[0]
    length = _utf8_length(text[0])
    if length == 0 or len(text) < length:
        return " "
    try:
        return text[:length].decode("utf-8")
    except UnicodeDecodeError:
        return " "


def event_from_entity(entity: EventEntity) -> EventStruct:
    location = entity.location or ""
    separator = " " if entity.location is not None else ""
    room = entity.lark_meeting_room_name or ""
    return EventStruct(
        id=entity.id,
        summary=entity.summary,
        summary_abbr=first_unicode(entity.summary),
        description=entity.description,
        time=convert_time_range(entity.start, entity.end),
        location=f"{location}{separator}{room}",
        tag=entity.tag,
        lark_department_name=entity.lark_department_name,
        state=EventState(entity.state),
        is_subscribed=entity.is_subscribed,
        is_check_in=entity.is_checked_in,
    )


def events_from_entities(entities: Iterable[EventEntity]) -> List[EventStruct]:
    return [event_from_entity(entity) for entity in entities]


def feedback_from_entity(entity: Optional[FeedbackEntity]) -> FeedbackStruct:
    if entity is None:
        return FeedbackStruct(success=True, has_feedbacked=False, rate=0, content="")
    return FeedbackStruct(
        success=True,
        has_feedbacked=True,
        rate=entity.rating,
        content=entity.feedback or "",
    )


def contributor_from(avatar: Union[str, Path, None], html_url: str) -> ContributorStruct:
    return ContributorStruct(avatar=Path(avatar) if avatar else None, html_url=html_url)