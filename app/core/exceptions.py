class CRMError(Exception):
    """Base class for all CRM domain exceptions.

    Every custom exception in this module inherits from here so that a
    single ``except CRMError`` clause can catch any domain error.
    """

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(detail)


class AgentNotFoundError(CRMError):
    """Raised when a requested agent does not exist."""

    def __init__(self, detail: str = "Agent not found"):
        super().__init__(detail)


class AgentNotEligibleError(CRMError):
    """Raised when an agent exists but cannot be rated.

    Only active contributors take part in rating and ranking.
    """

    def __init__(self, detail: str = "Agent is not eligible for rating"):
        super().__init__(detail)


class DealNotFoundError(CRMError):
    """Raised when a requested deal does not exist."""

    def __init__(self, detail: str = "Deal not found"):
        super().__init__(detail)


class RatingRecalculationTimeoutError(CRMError):
    """Raised when a batch rating recalculation exceeds its time budget."""

    def __init__(self, detail: str = "Rating recalculation timed out"):
        super().__init__(detail)
