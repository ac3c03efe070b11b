"""Exception taxonomy for the analysis job pipeline."""


class StockResearchError(Exception):
    """Base class for all pipeline errors."""

    pass


class TickerValidationError(StockResearchError, ValueError):
    """Raised when a submitted ticker is empty, too long, or malformed."""

    pass


class QueueFullError(StockResearchError):
    """Raised when the work queue stays full past the enqueue timeout."""

    def __init__(self, capacity: int, timeout_seconds: float):
        super().__init__(
            f"Background task queue is full (capacity: {capacity}). "
            "Unable to enqueue new work item. Please try again later."
        )
        self.capacity = capacity
        self.timeout_seconds = timeout_seconds


class JobNotFoundError(StockResearchError, KeyError):
    """Raised when mutating a job id the store has never seen."""

    def __init__(self, job_id: str):
        super().__init__(f"Job {job_id} not found.")
        self.job_id = job_id

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0])


class InvalidStatusTransitionError(StockResearchError):
    """Raised when a status update would move a job backward or skip Running."""

    def __init__(self, job_id: str, current: str, requested: str):
        super().__init__(f"Job {job_id}: cannot move from {current} to {requested}")
        self.job_id = job_id
        self.current = current
        self.requested = requested


class ResultAlreadySavedError(StockResearchError):
    """Raised when a report is saved twice or outside the Running state."""

    pass


class MissingStepOutputError(StockResearchError):
    """Raised when a pipeline step did not produce the output the next step needs."""

    def __init__(self, step_name: str, detail: str | None = None):
        message = f"{step_name} step did not produce expected output."
        if detail:
            message = f"{message} {detail}"
        super().__init__(message)
        self.step_name = step_name
