"""Exceptions raised by the trending engine."""


class TrendbotError(Exception):
    """Base exception for trendbot."""
    pass


class ConfigurationError(TrendbotError):
    """Raised when engine configuration or analysis options are invalid."""
    pass


class ArticleValidationError(TrendbotError):
    """Raised when an article record does not satisfy the input contract."""

    def __init__(self, message: str, article_id=None):
        super().__init__(message)
        self.article_id = article_id
