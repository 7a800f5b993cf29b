"""
Training plan generation and calendar sync for The Social Runner.

This package provides:
- A deterministic plan generator turning a plan request into a weekly schedule
- Calendar event extraction from a stored plan record
- iCalendar export plus Google Calendar and Outlook deep links

Usage:
    # Generate a plan record from a wizard request
    python3 runner_plan.py generate request.json -o plan.json

    # Export it as a calendar file
    python3 runner_plan.py ical plan.json -o training_plan.ics

    # From code
    from training_plans import PlanGenerator, CalendarSync
    schedule = PlanGenerator().generate(plan_input)
    events = CalendarSync().extract_events(plan_record)
"""

from .calendar_sync import CalendarSync
from .errors import InputShapeError, PlanNotFound, TrainingPlanError
from .models import CalendarEvent, PlanInput, PlanRecord, WeekPlan, WorkoutSession
from .plan_generator import PlanGenerator, generate_training_plan

__all__ = [
    'PlanGenerator', 'generate_training_plan', 'CalendarSync',
    'PlanInput', 'PlanRecord', 'WeekPlan', 'WorkoutSession', 'CalendarEvent',
    'TrainingPlanError', 'InputShapeError', 'PlanNotFound',
]
__version__ = '1.0.0'
