class GardenQAError(Exception):
    """Base error for the garden Q&A package."""


class LoadError(GardenQAError):
    """The database document could not be fetched or read (network, HTTP status, file, JSON)."""


class FormatError(GardenQAError):
    """The document was fetched but does not have the expected shape."""
