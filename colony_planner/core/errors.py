# ========================
# file: colony_planner/core/errors.py
# ========================
class PlannerError(Exception):
    """Base error for the colony planner."""


class SettingsError(PlannerError):
    """Raised when planner settings cannot be loaded."""


class ValidationError(SettingsError):
    """Raised when planner settings fail validation."""


class CatalogError(PlannerError):
    """Raised when an authored template or limit table is inconsistent."""


class AnalysisError(PlannerError):
    """Raised when zone terrain data cannot be analyzed."""


class PersistenceError(PlannerError):
    """Raised when a persisted zone blob cannot be read or written."""
