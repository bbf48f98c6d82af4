class DomainError(Exception):
    def __init__(self, code: str, message: str, details: dict | None = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ConfigurationError(DomainError):
    """The program schedule is missing or incomplete. Not retried."""

    def __init__(self, message: str, code: str = "CFG_001", details: dict | None = None):
        super().__init__(code, message, details)


class ScheduleLookupError(ConfigurationError):
    def __init__(self, day_in_cycle: int, details: dict | None = None):
        self.day_in_cycle = day_in_cycle
        super().__init__(
            f"No scheduled day defined for day {day_in_cycle} of the cycle",
            code="CFG_SCHEDULE_LOOKUP",
            details=details or {"day_in_cycle": day_in_cycle},
        )


class PersistenceError(DomainError):
    """A call into the program store failed. Safe to retry."""

    def __init__(self, operation: str, message: str | None = None, details: dict | None = None):
        self.operation = operation
        code = f"PER_{operation.upper()}_001"
        msg = message or f"Store operation '{operation}' failed"
        super().__init__(code, msg, details or {"operation": operation})


class ValidationError(DomainError):
    def __init__(self, field: str, message: str, details: dict | None = None):
        code = f"VAL_{field.upper()}_001"
        msg = f"Validation failed for {field}: {message}"
        super().__init__(code, msg, details or {"field": field})
