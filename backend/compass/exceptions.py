"""
Engine exceptions.

The engine has no I/O, so the only errors it raises are caller contract
breaches: a snapshot or argument that no valid upstream state could produce.
Missing optional data is never an error.
"""


class EngineContractError(ValueError):
    """Raised when a caller hands the engine an impossible input."""

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self):
        """Serialize for an API error response."""
        return {
            "error": {
                "code": self.__class__.__name__,
                "message": self.message,
                "details": self.details,
            }
        }


def require_non_negative(name: str, value: int) -> int:
    """Reject negative counts instead of clamping them."""
    if value < 0:
        raise EngineContractError(
            f"{name} must not be negative",
            details={name: value},
        )
    return value


def require_positive(name: str, value: int) -> int:
    """Reject zero or negative limits."""
    if value <= 0:
        raise EngineContractError(
            f"{name} must be positive",
            details={name: value},
        )
    return value
