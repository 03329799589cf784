"""
Exception hierarchy shared by the calculator, the record store and the CLIs.
"""


class FleetAvailabilityError(Exception):
    """Base class for every error raised by this package."""


class InvalidInputError(FleetAvailabilityError, ValueError):
    """Malformed input: unparseable date/time, negative fleet size, unknown enum value."""


class ValidationError(FleetAvailabilityError, ValueError):
    """A unit, composition, driver or work order failed business validation."""


class RecordNotFoundError(FleetAvailabilityError, KeyError):
    """A record required by the operation does not exist in the store."""

    def __str__(self) -> str:
        # KeyError repr-quotes its message; keep it readable in logs
        return str(self.args[0]) if self.args else ""
