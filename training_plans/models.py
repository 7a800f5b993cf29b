"""
Plan input, generated schedule and calendar event types.

Persisted shapes use the camelCase keys stored in the training plan
record; the dataclasses use snake_case attributes.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Optional

WEEKDAYS = ('monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday')

GOAL_TYPES = ('race_prep', 'fitness_improvement', 'weight_loss', 'general_fitness')
RACE_TYPES = ('5k', '10k', 'half_marathon', 'marathon')
FITNESS_LEVELS = ('beginner', 'intermediate', 'advanced')
INTENSITIES = ('low', 'moderate', 'high')


def parse_date(value):
    """Accept a date, datetime or ISO 'YYYY-MM-DD' string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


@dataclass(frozen=True)
class Goal:
    type: str = 'general_fitness'
    race_type: Optional[str] = None
    race_date: Optional[date] = None
    target_distance: Optional[str] = None


@dataclass(frozen=True)
class Fitness:
    current_level: str = 'beginner'
    weekly_distance_km: float = 10
    longest_run_km: float = 5
    experience: str = 'new'


@dataclass(frozen=True)
class Preferences:
    days_per_week: int = 3
    preferred_days: tuple = ('tuesday', 'thursday', 'saturday')
    time_available: str = '45min'
    location: str = 'outdoor'
    adapt_to_pace: bool = True


@dataclass(frozen=True)
class PlanSchedule:
    duration_weeks: int
    start_date: date


@dataclass(frozen=True)
class PlanInput:
    goal: Goal
    fitness: Fitness
    preferences: Preferences
    schedule: PlanSchedule

    @classmethod
    def from_dict(cls, payload):
        """Build an input from the wizard's JSON body, filling in the usual defaults."""
        goal = payload.get('goal') or {}
        fitness = payload.get('fitness') or {}
        prefs = payload.get('preferences') or {}
        schedule = payload.get('schedule') or {}

        weekly = fitness.get('weeklyDistanceKm', fitness.get('weeklyDistance'))
        days_per_week = prefs.get('daysPerWeek')
        longest = fitness.get('longestRunKm', fitness.get('longestRun'))
        race_date = goal.get('raceDate')
        preferred = prefs.get('preferredDays') or Preferences.preferred_days

        return cls(
            goal=Goal(
                type=goal.get('type') or goal.get('objective') or 'general_fitness',
                race_type=goal.get('raceType'),
                race_date=parse_date(race_date) if race_date else None,
                target_distance=goal.get('targetDistance'),
            ),
            fitness=Fitness(
                current_level=fitness.get('currentLevel') or 'beginner',
                weekly_distance_km=float(weekly) if weekly not in (None, '') else 10,
                longest_run_km=float(longest) if longest not in (None, '') else 5,
                experience=fitness.get('experience') or 'new',
            ),
            preferences=Preferences(
                days_per_week=int(days_per_week) if days_per_week not in (None, '') else 3,
                preferred_days=tuple(day.lower() for day in preferred),
                time_available=prefs.get('timeAvailable') or prefs.get('timePerSession') or '45min',
                location=prefs.get('location') or 'outdoor',
                adapt_to_pace=bool(prefs.get('adaptToPace', True)),
            ),
            schedule=PlanSchedule(
                duration_weeks=int(schedule.get('durationWeeks') or schedule.get('duration') or 12),
                start_date=parse_date(schedule['startDate']),
            ),
        )


_OPTIONAL_FIELDS = ('distance', 'duration', 'pace', 'description', 'warmup', 'cooldown', 'notes')


def _text(value):
    return None if value is None else str(value)


@dataclass
class WorkoutSession:
    type: str
    name: str
    intensity: str = 'low'
    distance: Optional[str] = None
    duration: Optional[str] = None
    pace: Optional[str] = None
    description: Optional[str] = None
    warmup: Optional[str] = None
    cooldown: Optional[str] = None
    notes: Optional[str] = None
    completed: bool = False

    @property
    def is_rest(self):
        return self.type == 'rest'

    def to_dict(self):
        data = {'type': self.type, 'name': self.name}
        for name in _OPTIONAL_FIELDS:
            value = getattr(self, name)
            if value is not None:
                data[name] = value
        data['intensity'] = self.intensity
        data['completed'] = self.completed
        return data

    @classmethod
    def from_dict(cls, data):
        session_type = data.get('type') or 'rest'
        return cls(
            type=session_type,
            name=data.get('name') or session_type.replace('_', ' ').title(),
            intensity=data.get('intensity') or 'moderate',
            completed=bool(data.get('completed', False)),
            **{name: _text(data.get(name)) for name in _OPTIONAL_FIELDS},
        )


@dataclass
class WeekPlan:
    focus: str
    total_distance: str
    days: Dict[str, WorkoutSession] = field(default_factory=dict)

    def to_dict(self):
        data = {'focus': self.focus, 'totalDistance': self.total_distance}
        for day in WEEKDAYS:
            data[day] = self.days[day].to_dict()
        return data

    @classmethod
    def from_dict(cls, data):
        days = {}
        for day in WEEKDAYS:
            entry = data.get(day)
            if isinstance(entry, dict):
                days[day] = WorkoutSession.from_dict(entry)
        return cls(
            focus=data.get('focus', ''),
            total_distance=data.get('totalDistance', ''),
            days=days,
        )


WeeklySchedule = Dict[int, WeekPlan]


def schedule_to_dict(schedule):
    """JSON-ready form of a weekly schedule, keyed by week number."""
    return {week: schedule[week].to_dict() for week in sorted(schedule)}


def schedule_from_dict(data):
    """Read a persisted schedule; JSON round-trips turn week keys into strings."""
    return {int(week): WeekPlan.from_dict(week_data) for week, week_data in data.items()}


@dataclass
class PlanRecord:
    id: object
    user_id: str
    plan_name: str
    duration: int
    start_date: date
    weekly_schedule: WeeklySchedule
    end_date: Optional[date] = None
    plan_type: Optional[str] = None

    @classmethod
    def from_dict(cls, data):
        end_date = data.get('endDate')
        schedule = data.get('weeklySchedule') or {}
        return cls(
            id=data.get('id'),
            user_id=data.get('userId'),
            plan_name=data.get('planName') or 'Training Plan',
            duration=int(data.get('duration') or len(schedule) or 1),
            start_date=parse_date(data['startDate']),
            end_date=parse_date(end_date) if end_date else None,
            plan_type=data.get('planType'),
            weekly_schedule=schedule_from_dict(schedule),
        )


@dataclass
class CalendarEvent:
    id: str
    title: str
    description: str
    start: datetime
    end: datetime
    location: Optional[str] = None
    category: str = 'Training'
    all_day: bool = False
