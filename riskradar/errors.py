class RiskRadarError(Exception):
    pass


class TokenDataValidationError(RiskRadarError, ValueError):
    """Malformed token input, rejected before any scoring happens."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class UnitConversionError(TokenDataValidationError):
    pass


class ExplainerError(RiskRadarError):
    pass


class ExplainerTimeoutError(ExplainerError):
    pass
