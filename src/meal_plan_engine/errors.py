"""Exceptions raised by the meal plan engine."""


class PlanEngineError(Exception):
    """Base class for engine errors."""


class UnsupportedPlanShape(PlanEngineError):
    """The plan's content blob lacks the structure an operation needs."""


class ValidationFailure(PlanEngineError, ValueError):
    """A required value is missing or out of range."""


class PlanNotFound(PlanEngineError, KeyError):
    """No plan exists with the requested id."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "Plan not found"
