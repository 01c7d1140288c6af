class ApiError(RuntimeError):
    """Raised when the VetFinder backend rejects a request or cannot be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class RequestCancelled(RuntimeError):
    """Raised when a request is attempted after its wizard was abandoned."""
    pass


class WizardStateError(RuntimeError):
    """Raised when a wizard transition is not allowed from the current step."""
    pass


class SubmissionError(RuntimeError):
    """Raised when one of the sequential submit calls fails."""

    def __init__(self, stage: str, message: str, company_id: int | None = None) -> None:
        super().__init__(message)
        self.stage = stage
        self.message = message
        self.company_id = company_id


class NetworkError(ApiError):
    """Raised when the backend could not be reached at all."""
    pass
