# overload_gen/errors.py
"""Fatal errors raised while generating overload tests.

Generation is a build step: any of these aborts the whole run and nothing
that was produced before the failure may be written out.
"""


class GenerationError(Exception):
    """Base class for every error that aborts a generation run."""


class UnknownOperandKind(GenerationError, ValueError):
    """An operand or return type carries a kind outside the type registry."""


class UnsupportedSignedPair(GenerationError, NotImplementedError):
    """Encrypted x encrypted overloads on signed integer types."""


class MissingTestFixtures(GenerationError, AssertionError):
    """A generated overload has no registered test vector."""


class ValueOutOfRange(GenerationError, AssertionError):
    """A fixture value does not fit the bit width of its operand."""


class InvalidFixtureValue(GenerationError, ValueError):
    """A fixture value, vector or file cannot be read as integers."""


class MissingRequiredConfiguration(GenerationError, KeyError):
    """A required configuration value is absent."""

    def __str__(self) -> str:
        # KeyError quotes its argument by default
        return str(self.args[0]) if self.args else ""
