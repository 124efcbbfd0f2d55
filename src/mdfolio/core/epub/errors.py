"""Errors raised while building and packaging an EPUB"""


class EpubError(Exception):
    """Base class for packaging errors."""


class EpubValidationError(EpubError, ValueError):
    """The caller broke the builder contract: bad chapter data, duplicate id, no chapters."""


class CoverDecodeError(EpubError, ValueError):
    """The cover payload could not be decoded; raised only while generating."""
