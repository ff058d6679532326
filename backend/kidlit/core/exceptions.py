class IdentityStoreError(Exception):
    """The identity/data store rejected a call."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RegistrationError(Exception):
    """Student registration failed with a status chosen by the workflow."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class GenerationError(Exception):
    """Base class for content generation failures."""


class ProviderConfigurationError(GenerationError):
    pass


class ProviderUnavailableError(GenerationError):
    """The provider could not be reached or did not answer in time."""

    def __init__(self, message: str, *, timed_out: bool = False):
        super().__init__(message)
        self.timed_out = timed_out


class ProviderDecodeError(GenerationError):
    def __init__(self, raw_body: str):
        super().__init__("Invalid response from Gemini API")
        self.raw_body = raw_body


class ProviderAPIError(GenerationError):
    def __init__(self, status_code: int, payload):
        super().__init__(f"Error from Gemini API (status {status_code})")
        self.status_code = status_code
        self.payload = payload
