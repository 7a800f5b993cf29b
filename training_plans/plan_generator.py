"""
Generate multi-week running schedules from a training plan request.

Everything here is table driven and deterministic: the same PlanInput
always yields the same WeeklySchedule.
"""

import math
from dataclasses import replace
from datetime import timedelta

from loguru import logger

from .errors import InputShapeError
from .models import WEEKDAYS, WeekPlan, WorkoutSession, schedule_to_dict

# Starting volume cap and absolute weekly ceiling (km) per fitness level.
LEVEL_BASE_CAP = {'beginner': 20, 'intermediate': 40, 'advanced': 60}
LEVEL_WEEKLY_MAX = {'beginner': 35, 'intermediate': 60, 'advanced': 85}

PACES = {
    'beginner': {
        'easy': '6:00-6:30/km',
        'recovery': '6:30-7:00/km',
        'tempo': '5:30-5:45/km',
        'long': '6:00-6:15/km',
    },
    'intermediate': {
        'easy': '5:30-6:00/km',
        'recovery': '6:00-6:30/km',
        'tempo': '5:00-5:15/km',
        'long': '5:30-5:45/km',
    },
    'advanced': {
        'easy': '5:10-5:30/km',
        'recovery': '5:30-6:00/km',
        'tempo': '4:44-4:55/km',
        'long': '5:10-5:25/km',
    },
}

# (level, phase) -> interval prescription
TRACK_WORKOUTS = {
    ('beginner', 1): '4 x 400m with 200m walk recovery @ 2:10/400m + warm-up/cool-down',
    ('beginner', 2): '5 x 600m with 200m jog recovery @ 3:15/600m + warm-up/cool-down',
    ('beginner', 3): '3 x 800m with 400m recovery @ 4:20/800m + warm-up/cool-down',
    ('intermediate', 1): '4 x 800m with 400m recovery @ 3:45/800m + warm-up/cool-down',
    ('intermediate', 2): '6 x 400m with 200m recovery @ 1:55/400m + warm-up/cool-down',
    ('intermediate', 3): '3 x 1200m with 400m recovery @ 5:30/1200m + warm-up/cool-down',
    ('advanced', 1): '6 x 800m with 400m recovery jog @ 3:12/800m + warm-up/cool-down',
    ('advanced', 2): '5 x 1km with 400m recovery @ 3:56/km + warm-up/cool-down',
    ('advanced', 3): '3 x 1600m with 600m recovery @ 6:20/1600m + warm-up/cool-down',
}

TRACK_NAMES = {1: 'Aerobic Intervals', 2: 'VO2 Max Intervals', 3: 'Race Pace Work'}
TRACK_PACES = {1: '10K pace', 2: '5K pace', 3: 'Race pace'}

FOCUS_LABELS = {
    'race_prep': ('Base Building', 'Build Phase', 'Peak & Taper'),
    'fitness_improvement': ('Aerobic Development', 'Strength & Speed', 'Performance'),
    'weight_loss': ('Consistency Building', 'Fat Burning', 'Maintenance'),
}

# Week layouts: (session type, share of weekly volume, min km, max km), in
# the order sessions are handed out to the preferred days. 'speed_play'
# alternates between fartlek (odd weeks) and hills (even weeks).
DAY_LAYOUTS = {
    3: (
        ('easy_run', 0.25, 3, 8),
        ('tempo_run', 0.35, 5, 10),
        ('long_run', 0.40, 8, 16),
    ),
    4: (
        ('recovery_run', 0.15, 3, 6),
        ('track_work', 0.25, 6, 10),
        ('tempo_run', 0.30, 8, 13),
        ('long_run', 0.35, 12, 22),
    ),
    5: (
        ('recovery_run', 0.12, 3, 5),
        ('track_work', 0.18, 6, 10),
        ('speed_play', 0.18, 6, 10),
        ('tempo_run', 0.25, 10, 16),
        ('long_run', 0.27, 16, 32),
    ),
}

RACE_NAMES = {
    '5k': '5K Race',
    '10k': '10K Race',
    'half_marathon': 'Half Marathon',
    'marathon': 'Marathon',
}


def round_half_up(value):
    """Round halves upwards; builtin round() rounds halves to even."""
    return int(math.floor(value + 0.5))


def clamp(value, low, high):
    return max(low, min(high, value))


def training_phase(week, total_weeks):
    """Periodisation phase (1=base, 2=build, 3=peak) for a 1-indexed week."""
    return math.ceil(week / total_weeks * 3)


def weekly_distance(fitness, week):
    """Target km for the given week: capped base volume grown 10% per week, max +50%."""
    level = fitness.current_level
    base = min(fitness.weekly_distance_km, LEVEL_BASE_CAP.get(level, LEVEL_BASE_CAP['advanced']))
    progression = min(1 + (week - 1) * 0.1, 1.5)
    distance = round_half_up(base * progression)
    return min(distance, LEVEL_WEEKLY_MAX.get(level, LEVEL_WEEKLY_MAX['advanced']))


def week_focus(week, goal_type, total_weeks):
    labels = FOCUS_LABELS.get(goal_type)
    if labels is None:
        return 'General Fitness'
    return labels[training_phase(week, total_weeks) - 1]


def track_workout(level, phase):
    if level not in ('advanced', 'intermediate'):
        level = 'beginner'
    return TRACK_WORKOUTS[(level, phase)]


def session_templates(level, week, total_weeks):
    """Session templates for one week, keyed by workout type."""
    phase = training_phase(week, total_weeks)
    paces = PACES.get(level, PACES['intermediate'])
    advanced = level == 'advanced'

    return {
        'easy_run': WorkoutSession(
            type='easy_run',
            name='Easy Run',
            description='Conversational pace aerobic run',
            pace=paces['easy'],
            intensity='low',
            warmup='10min easy jog',
            cooldown='5min walk + stretching',
        ),
        'recovery_run': WorkoutSession(
            type='recovery_run',
            name='Recovery Run',
            description='Very easy pace for active recovery',
            pace=paces['recovery'],
            intensity='low',
            duration='30-40min',
        ),
        'tempo_run': WorkoutSession(
            type='tempo_run',
            name='Tempo Run',
            description='Comfortably hard effort, threshold pace + warm-up & cool down',
            pace=f"{paces['tempo']} effort",
            intensity='high',
            warmup='1.5km easy + dynamic stretches',
            cooldown='1.5km easy',
        ),
        'fartlek': WorkoutSession(
            type='fartlek',
            name='Fartlek Run',
            description='Swedish speed play - varied pace throughout',
            pace='Variable from easy to 5K pace',
            intensity='moderate',
            warmup='10-15min easy',
            cooldown='10min easy',
        ),
        'hills': WorkoutSession(
            type='hills',
            name='Kenyan Hills' if advanced else 'Hill Session',
            description=('3 x 10min with 2min recovery jog between sets + warm-up/cool-down'
                         if advanced else 'Hill repeats for strength and power'),
            pace='5K-10K effort uphill',
            intensity='high',
            warmup='10min easy + 4 x 100m strides',
            cooldown='10min easy',
        ),
        'track_work': WorkoutSession(
            type='track_work',
            name=TRACK_NAMES[phase],
            description=track_workout(level, phase),
            pace=TRACK_PACES[phase],
            intensity='high',
            warmup='800m easy + 400m warm-up',
            cooldown='400m easy',
        ),
        'long_run': WorkoutSession(
            type='long_run',
            name='Long Run',
            description='Aerobic endurance building run',
            pace=f"{paces['long']} easy, off road if possible",
            intensity='low' if week <= total_weeks / 2 else 'moderate',
            warmup='Start very easy for first 2km',
            cooldown='10min easy walk + full stretch',
        ),
        'cross_training': WorkoutSession(
            type='cross_training',
            name='Cross Training',
            description='Focus on upper body and core strength or yoga/pilates',
            duration='45-60min',
            intensity='low',
        ),
        'rest': WorkoutSession(
            type='rest',
            name='Rest Day',
            description='Complete rest or gentle yoga/stretching',
            intensity='low',
        ),
    }


def validate_input(plan_input):
    """Raise InputShapeError for week shapes the generator has no layout for."""
    prefs = plan_input.preferences
    if prefs.days_per_week not in DAY_LAYOUTS:
        raise InputShapeError(
            f"daysPerWeek must be one of {sorted(DAY_LAYOUTS)}, got {prefs.days_per_week}")
    if len(prefs.preferred_days) != prefs.days_per_week:
        raise InputShapeError(
            f"expected {prefs.days_per_week} preferred days, got {len(prefs.preferred_days)}")
    unknown = [day for day in prefs.preferred_days if day not in WEEKDAYS]
    if unknown:
        raise InputShapeError(f"unknown weekday(s): {', '.join(unknown)}")
    if len(set(prefs.preferred_days)) != len(prefs.preferred_days):
        raise InputShapeError("preferred days must not repeat")
    if plan_input.schedule.duration_weeks <= 0:
        raise InputShapeError("durationWeeks must be positive")


class PlanGenerator:
    def generate(self, plan_input):
        """Build the full weekly schedule for a plan request."""
        validate_input(plan_input)

        total_weeks = plan_input.schedule.duration_weeks
        schedule = {}
        for week in range(1, total_weeks + 1):
            schedule[week] = self._build_week(plan_input, week, total_weeks)

        logger.debug(
            "Generated training plan",
            weeks=total_weeks,
            level=plan_input.fitness.current_level,
            days_per_week=plan_input.preferences.days_per_week,
            goal=plan_input.goal.type,
        )
        return schedule

    def _build_week(self, plan_input, week, total_weeks):
        target = weekly_distance(plan_input.fitness, week)
        templates = session_templates(plan_input.fitness.current_level, week, total_weeks)
        layout = DAY_LAYOUTS[plan_input.preferences.days_per_week]

        days = {}
        for day, (session_type, share, low, high) in zip(plan_input.preferences.preferred_days, layout):
            if session_type == 'speed_play':
                session_type = 'fartlek' if week % 2 == 1 else 'hills'
            km = clamp(round_half_up(target * share), low, high)
            days[day] = replace(templates[session_type], distance=f"{km}km")

        for day in WEEKDAYS:
            if day not in days:
                days[day] = replace(templates['rest'])

        return WeekPlan(
            focus=week_focus(week, plan_input.goal.type, total_weeks),
            total_distance=f"{target}km",
            days={day: days[day] for day in WEEKDAYS},
        )

    def plan_name(self, plan_input):
        weeks = plan_input.schedule.duration_weeks
        goal = plan_input.goal
        if goal.type == 'race_prep' and goal.race_type in RACE_NAMES:
            return f"{RACE_NAMES[goal.race_type]} Training Plan ({weeks} weeks)"
        if goal.type == 'fitness_improvement':
            return f"Fitness Improvement Plan ({weeks} weeks)"
        if goal.type == 'weight_loss':
            return f"Weight Loss Running Plan ({weeks} weeks)"
        return f"Custom Training Plan ({weeks} weeks)"

    def build_plan_record(self, plan_input, plan_id=None, user_id=None):
        """
        Generate a schedule and wrap it in the record shape a caller persists.

        The end date is start + 7 days per week; rest days list the
        weekdays that received no session.
        """
        schedule = self.generate(plan_input)
        start = plan_input.schedule.start_date
        weeks = plan_input.schedule.duration_weeks
        prefs = plan_input.preferences

        return {
            'id': plan_id,
            'userId': user_id,
            'planName': self.plan_name(plan_input),
            'planType': plan_input.goal.race_type or plan_input.goal.type,
            'duration': weeks,
            'startDate': start.isoformat(),
            'endDate': (start + timedelta(days=weeks * 7)).isoformat(),
            'currentWeek': 1,
            'status': 'active',
            'weeklySchedule': {str(week): data for week, data in schedule_to_dict(schedule).items()},
            'preferences': {
                'daysPerWeek': prefs.days_per_week,
                'preferredDays': list(prefs.preferred_days),
                'maxDistancePerWeek': plan_input.fitness.weekly_distance_km * 2,
                'restDays': [day for day in WEEKDAYS if day not in prefs.preferred_days],
                'adaptToFitness': prefs.adapt_to_pace,
            },
        }


def generate_training_plan(plan_input):
    """Convenience wrapper around PlanGenerator().generate()."""
    return PlanGenerator().generate(plan_input)
