"""Exceptions raised by notecard."""


class NotecardError(Exception):
    """Base class for all notecard errors."""


class FontLoadError(NotecardError):
    """A font face could not be loaded at startup. Fatal."""


class EventNotFoundError(NotecardError):
    """The event source has no event for the requested identifier."""


class EventFetchError(NotecardError):
    """The event source failed while fetching an event."""


class InvalidImageError(NotecardError):
    """An image with a non-positive width or height was passed to a transform."""


class ImageFetchError(NotecardError):
    """An image could not be downloaded or decoded."""
