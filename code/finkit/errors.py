class FinanceError(Exception):
    """Base class for every error raised by the calculation core."""


class InvalidInput(FinanceError, ValueError):
    def __init__(self, field: str, constraint: str):
        self.field = field
        self.constraint = constraint
        super().__init__(f"{field}: {constraint}")

    def to_dict(self) -> dict:
        return {"field": self.field, "constraint": self.constraint}


class InvalidTransition(FinanceError):
    """Raised when the risk questionnaire is driven out of order."""
