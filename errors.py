class AuditError(Exception):
    """Base for failures the request handler turns into an error payload."""
    status_code = 500


class InvalidInput(AuditError):
    status_code = 400


class ScanFailure(AuditError):
    """Browser launch, navigation or analyzer failure."""
    status_code = 502


class CompositionFailure(AuditError):
    """The PDF artifact could not be written."""
    status_code = 500
