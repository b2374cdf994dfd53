from typing import Dict, Optional


class GiftFinderError(Exception):
    """Base class for errors shown to the user as a single message."""


class ConfigurationError(GiftFinderError):
    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message
            or "API key is not configured. Please set the OPENAI_API_KEY "
            "environment variable in your .env file."
        )


class UpstreamAuthError(GiftFinderError):
    def __init__(self, message: Optional[str] = None):
        super().__init__(message or "The API key is invalid. Please check your configuration.")


class UpstreamRequestError(GiftFinderError):
    pass


class FormValidationError(GiftFinderError):
    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(self.errors.values()) or "Invalid form.")


class InvalidTransition(GiftFinderError):
    pass
