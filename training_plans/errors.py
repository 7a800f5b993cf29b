"""Exceptions raised by the plan generator and calendar sync."""


class TrainingPlanError(Exception):
    """Base class for training plan errors."""


class InputShapeError(TrainingPlanError, ValueError):
    """Plan input describes a week shape the generator does not support."""


class PlanNotFound(TrainingPlanError, LookupError):
    """Plan is missing or belongs to another user."""

    def __init__(self, plan_id=None):
        self.plan_id = plan_id
        super().__init__("Training plan not found")
