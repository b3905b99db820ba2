class BibshelfError(Exception):
    """Base error for all user-facing bibshelf exceptions."""


class ConfigurationError(BibshelfError):
    """Raised when configuration is invalid or incomplete."""


class ResolutionError(BibshelfError):
    """Raised when the DOI service cannot be reached or answers with an error."""


class ParseError(BibshelfError):
    """Raised when bibliographic text is malformed or incomplete."""


class DuplicateKeyError(BibshelfError):
    """Raised when an entry with the same citation key already exists."""


class NotFoundError(BibshelfError):
    """Raised when no entry exists for a citation key."""


class EditorError(BibshelfError):
    """Raised when the external editor fails to run."""


class SelectorError(BibshelfError):
    """Raised when the external selector cannot be launched."""


class EmptySelectionError(BibshelfError):
    """Raised when a selection is requested over no candidates."""
