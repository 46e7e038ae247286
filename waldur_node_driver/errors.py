"""Exceptions raised by the driver to its host."""


class DriverError(Exception):
    """Base class for every error the driver reports to the host."""


class ConfigurationError(DriverError):
    """A required option is missing or has an invalid value."""


class BackendError(DriverError):
    """
    The Waldur API answered with a status code other than the expected one.

    The response body is logged where the error is raised and is deliberately
    kept out of the message, so the host can show the error to users as is.
    """

    def __init__(
        self,
        message: str,
        machine_name: str,
        status_code: int | None = None,
        resource_uuid: str | None = None,
    ):
        super().__init__(message)
        self.machine_name = machine_name
        self.status_code = status_code
        self.resource_uuid = resource_uuid


class OrderError(BackendError):
    """A submitted marketplace order failed or never referenced its resource."""
