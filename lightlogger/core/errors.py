"""
Error Types

Exception hierarchy shared by the location, storage and export layers.
"""


class LightLoggerError(Exception):
    """Base exception for light logger errors"""
    pass


class PermissionDenied(LightLoggerError):
    """Location permission was denied or restricted by the user or system"""
    pass


class LocationUnavailable(LightLoggerError):
    """Provider reported a (possibly transient) failure to produce a fix"""
    pass


class InvalidInput(LightLoggerError, ValueError):
    """Caller supplied input the store cannot accept"""
    pass


class EncodingError(LightLoggerError, ValueError):
    """A record cannot be represented in the requested export format"""
    pass
