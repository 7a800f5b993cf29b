"""
Turn a stored training plan into calendar events and calendar exports.

Events are recomputed from the plan record on every request, so nothing in
here may depend on the clock: the same record always produces the same
event ids, times and text.
"""

import math
import re
from datetime import datetime, time, timedelta
from urllib.parse import urlencode

import pytz
from icalendar import Calendar, Event
from loguru import logger

from . import config
from .errors import PlanNotFound
from .models import WEEKDAYS, CalendarEvent, PlanRecord

# Preferred start time (hour, minute) per workout type.
START_TIMES = {
    'easy_run': (6, 30),
    'tempo_run': (6, 0),
    'long_run': (7, 0),
    'track_work': (6, 0),
    'intervals': (6, 0),
    'recovery_run': (7, 0),
    'hills': (6, 15),
    'hill_training': (6, 15),
    'fartlek': (6, 30),
}
DEFAULT_START_TIME = (6, 30)

# Minutes per km used when the session pace is a band rather than one value.
PACE_MINUTES = {
    'easy_run': 6.0,
    'tempo_run': 4.5,
    'long_run': 6.5,
    'track_work': 4.0,
    'intervals': 4.0,
    'recovery_run': 7.0,
    'hills': 5.5,
    'hill_training': 5.5,
    'fartlek': 5.0,
}
DEFAULT_PACE_MINUTES = 6.0

DEFAULT_DURATIONS = {
    'easy_run': 45,
    'tempo_run': 50,
    'long_run': 90,
    'track_work': 60,
    'intervals': 60,
    'recovery_run': 30,
    'hills': 55,
    'hill_training': 55,
    'fartlek': 50,
    'cross_training': 60,
}
DEFAULT_DURATION = 45

INTENSITY_EMOJI = {'high': '🔥', 'low': '🟢'}
MODERATE_EMOJI = '🟡'

DEFAULT_NOTE = 'Focus on form and consistent effort.'
FOOTER = 'Generated by The Social Runner training plan system.'

PRODID = '-//The Social Runner//Training Plan//EN'
GOOGLE_BASE_URL = 'https://calendar.google.com/calendar/render'
OUTLOOK_BASE_URL = 'https://outlook.live.com/calendar/0/deeplink/compose'

HOUR_RE = re.compile(r'(\d+)\s*hour')
MINUTE_RE = re.compile(r'(\d+)\s*min')
DISTANCE_RE = re.compile(r'\d+(?:\.\d+)?')
SINGLE_PACE_RE = re.compile(r'^\s*(\d+):([0-5]\d)\s*(?:/\s*km)?\s*$')


def parse_duration_minutes(duration):
    """Minutes in strings like '45 minutes' or '1 hour 15 min'; 0 when nothing matches."""
    text = str(duration).lower()
    minutes = 0
    hours = HOUR_RE.search(text)
    mins = MINUTE_RE.search(text)
    if hours:
        minutes += int(hours.group(1)) * 60
    if mins:
        minutes += int(mins.group(1))
    return minutes


def parse_distance_km(distance):
    match = DISTANCE_RE.search(str(distance or ''))
    return float(match.group(0)) if match else None


def pace_minutes_per_km(pace, workout_type):
    """Use an exact 'M:SS/km' pace when given, otherwise the per-type estimate."""
    match = SINGLE_PACE_RE.match(str(pace or ''))
    if match:
        return int(match.group(1)) + int(match.group(2)) / 60
    return PACE_MINUTES.get(workout_type, DEFAULT_PACE_MINUTES)


def workout_duration(session):
    """Planned minutes for a session: explicit duration, then distance x pace, then type default."""
    if session.duration:
        # an unreadable duration falls back to the type default, not the distance
        minutes = parse_duration_minutes(session.duration)
        return minutes or DEFAULT_DURATIONS.get(session.type, DEFAULT_DURATION)

    distance_km = parse_distance_km(session.distance)
    if distance_km is not None:
        running = distance_km * pace_minutes_per_km(session.pace, session.type)
        warmup_cooldown = 15 if session.type == 'long_run' else 10
        return int(math.floor(running + warmup_cooldown + 0.5))

    return DEFAULT_DURATIONS.get(session.type, DEFAULT_DURATION)


def workout_title(session):
    type_name = session.type.replace('_', ' ').title()
    distance = f" - {session.distance}" if session.distance else ''
    emoji = INTENSITY_EMOJI.get(session.intensity, MODERATE_EMOJI)
    return f"{type_name}{distance} {emoji}"


def workout_description(session, week):
    lines = [
        f"Training Week {week}",
        f"Workout: {session.type.replace('_', ' ').upper()}",
        f"Distance: {session.distance}" if session.distance else '',
        f"Target Pace: {session.pace}" if session.pace else '',
        f"Duration: {session.duration}" if session.duration else '',
        f"Intensity: {session.intensity}",
        session.notes or session.description or DEFAULT_NOTE,
        FOOTER,
    ]
    return '\n'.join(line for line in lines if line)


def _clean(text):
    return (text or '').replace('\r', '')


def _compact_utc(dt):
    """YYYYMMDDTHHMMSSZ, the form both iCal and Google Calendar links accept."""
    return dt.astimezone(pytz.utc).strftime('%Y%m%dT%H%M%SZ')


def _iso_utc(dt):
    return dt.astimezone(pytz.utc).strftime('%Y-%m-%dT%H:%M:%SZ')


class CalendarSync:
    def __init__(self, timezone=None, location=None, domain=None):
        self.timezone_name = timezone or config.TIMEZONE
        self.timezone = pytz.timezone(self.timezone_name)
        self.location = config.EVENT_LOCATION if location is None else location
        self.domain = domain or config.DOMAIN

    @staticmethod
    def load_record(record):
        if isinstance(record, PlanRecord):
            return record
        return PlanRecord.from_dict(record)

    def authorize(self, record, user_id):
        """
        Return the plan if it belongs to user_id.

        A missing plan and somebody else's plan raise the same PlanNotFound,
        so callers cannot tell the two apart.
        """
        if record is None:
            raise PlanNotFound()
        plan = self.load_record(record)
        if plan.user_id != user_id:
            logger.warning("Plan access refused", plan_id=plan.id, user_id=user_id)
            raise PlanNotFound(plan.id)
        return plan

    def extract_events(self, record):
        """Expand every non-rest session of the plan into a dated CalendarEvent."""
        plan = self.load_record(record)
        events = []

        for week in sorted(plan.weekly_schedule):
            week_plan = plan.weekly_schedule[week]
            week_start = plan.start_date + timedelta(days=(week - 1) * 7)

            for offset, day in enumerate(WEEKDAYS):
                session = week_plan.days.get(day)
                if session is None or session.is_rest:
                    continue

                workout_date = week_start + timedelta(days=offset)
                hour, minute = START_TIMES.get(session.type, DEFAULT_START_TIME)
                start = self.timezone.localize(datetime.combine(workout_date, time(hour, minute)))
                end = self.timezone.normalize(start + timedelta(minutes=workout_duration(session)))

                events.append(CalendarEvent(
                    id=f"{plan.id}-w{week}-{day}",
                    title=workout_title(session),
                    description=workout_description(session, week),
                    start=start,
                    end=end,
                    location=self.location or None,
                    category='Training',
                    all_day=False,
                ))

        return events

    def generate_icalendar(self, events, plan_name, stamp=None):
        """Render events as an iCalendar document (CRLF line endings)."""
        stamp = stamp or datetime.now(pytz.utc)

        cal = Calendar()
        cal.add('prodid', PRODID)
        cal.add('version', '2.0')
        cal.add('calscale', 'GREGORIAN')
        cal.add('method', 'PUBLISH')
        cal.add('x-wr-calname', _clean(plan_name))
        cal.add('x-wr-caldesc', 'Training plan workouts and schedule')
        cal.add('x-wr-timezone', self.timezone_name)

        for item in events:
            event = Event()
            event.add('uid', f"{item.id}@{self.domain}")
            event.add('dtstamp', stamp.astimezone(pytz.utc))
            event.add('dtstart', item.start.astimezone(pytz.utc))
            event.add('dtend', item.end.astimezone(pytz.utc))
            event.add('summary', _clean(item.title))
            event.add('description', _clean(item.description))
            event.add('categories', item.category)
            event.add('status', 'CONFIRMED')
            event.add('transp', 'OPAQUE')
            if item.location:
                event.add('location', _clean(item.location))
            cal.add_component(event)

        logger.debug("Rendered iCalendar", plan_name=plan_name, events=len(events))
        return cal.to_ical().decode('utf-8')

    def google_calendar_url(self, event):
        params = urlencode({
            'action': 'TEMPLATE',
            'text': event.title,
            'dates': f"{_compact_utc(event.start)}/{_compact_utc(event.end)}",
            'details': event.description,
            'location': event.location or '',
            'ctz': self.timezone_name,
        })
        return f"{GOOGLE_BASE_URL}?{params}"

    def outlook_url(self, event):
        params = urlencode({
            'subject': event.title,
            'startdt': _iso_utc(event.start),
            'enddt': _iso_utc(event.end),
            'body': event.description,
            'location': event.location or '',
        })
        return f"{OUTLOOK_BASE_URL}?{params}"

    def google_subscribe_url(self, feed_url):
        """Link that subscribes Google Calendar to a hosted .ics feed."""
        return f"https://calendar.google.com/calendar/u/0/r/settings/addbyurl?{urlencode({'cid': feed_url})}"

    def outlook_subscribe_url(self, feed_url, name='Training Plan'):
        return f"https://outlook.live.com/calendar/0/addcalendar?{urlencode({'name': name, 'url': feed_url})}"

    def sync_summary(self, record):
        plan = self.load_record(record)
        events = self.extract_events(plan)
        total = len(events)

        return {
            'planName': plan.plan_name,
            'totalWorkouts': total,
            'weeklyWorkouts': int(total / plan.duration + 0.5) if plan.duration else total,
            'duration': plan.duration,
            'startDate': plan.start_date.isoformat(),
            'endDate': plan.end_date.isoformat() if plan.end_date else None,
            'eventCount': total,
            'syncOptions': {
                'ical': True,
                'google': True,
                'outlook': True,
                'apple': True,
                'android': True,
            },
        }

    def week_workouts(self, record, week):
        """Dated, non-rest sessions for one week of the plan."""
        plan = self.load_record(record)
        week_plan = plan.weekly_schedule.get(week)
        if week_plan is None:
            return []

        week_start = plan.start_date + timedelta(days=(week - 1) * 7)
        workouts = []
        for offset, day in enumerate(WEEKDAYS):
            session = week_plan.days.get(day)
            if session is None or session.is_rest:
                continue
            entry = session.to_dict()
            entry.update({
                'id': f"{plan.id}-w{week}-{day}",
                'planId': plan.id,
                'week': week,
                'day': day,
                'date': (week_start + timedelta(days=offset)).isoformat(),
            })
            workouts.append(entry)
        return workouts
