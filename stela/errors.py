"""
Error types raised by the Stela hashing core
"""


class StelaError(ValueError):
    """Base class for every error raised by this package"""


class EncodingError(StelaError):
    """A value cannot be coerced into its declared type"""


class RangeError(EncodingError):
    """A numeric value violates its bit-width or field-modulus bound"""


class UnknownTypeError(StelaError, KeyError):
    """A type name has no registered signature"""

    def __str__(self):
        # KeyError quotes its argument; keep the plain message
        return str(self.args[0]) if self.args else ""
