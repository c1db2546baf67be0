"""Errors raised while importing a recipe from a source URL."""


class RecipeImportError(Exception):
    """Base class for recipe import failures."""


class ValidationError(RecipeImportError):
    """The submitted source URL is malformed. Raised before any fetch."""


class FetchError(RecipeImportError):
    """
    The page could not be fetched (non-2xx status or network failure).

    Fatal to the scrape attempt; the message is what gets recorded as the
    recipe's scrape_error.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ParseError(RecipeImportError):
    """A structured-data block could not be parsed. Recovered locally."""
