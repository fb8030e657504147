"""Conversion failures, one class per stage of the pipeline."""


class ConversionError(RuntimeError):
    """Base class for every failure raised by :func:`apngify.convert`."""


class UnsupportedFormat(ConversionError):
    """Raised when the format tag is outside the allow-list."""


class DecodeError(ConversionError):
    """Raised when image bytes are not a valid instance of the claimed format."""


class EncodeError(ConversionError):
    """Raised when PNG encoding runs out of resources."""


class BudgetUnattainable(ConversionError):
    """Raised when the downscale loop cannot get under the byte budget."""


class MalformedInput(ConversionError):
    """Raised when bytes handed to the splicer are not a structurally valid PNG."""
