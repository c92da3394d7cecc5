class HazardMonitorError(Exception):
    """Base class for every error raised by the hazard monitor."""


class AuthenticationRequired(HazardMonitorError):
    """The caller is not signed in to the managed backend."""

    def __init__(self, message="Sign in to continue", login_url=None):
        super().__init__(message)
        self.login_url = login_url


class ValidationError(HazardMonitorError):
    """A required report field is missing. Raised before any network call."""

    def __init__(self, missing_fields):
        self.missing_fields = list(missing_fields)
        super().__init__(f"Missing required fields: {', '.join(self.missing_fields)}")


class BackendError(HazardMonitorError):
    """A call to the managed backend failed."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class UploadFailure(BackendError):
    pass


class CreateFailure(BackendError):
    pass


class InferenceFailure(BackendError):
    pass


class GeolocationFailure(HazardMonitorError):
    pass
