import logging

from ..client import WaldurClient
from ..errors import BackendError
from ..models import ApiResponse, DriverConfig

logger = logging.getLogger(__name__)


class BaseRunner:
    """
    Base class for the components that talk to Waldur on behalf of one machine.

    It holds the per-call collaborators (API client, configuration and machine
    name) and the shared handling of unexpected status codes. Runners keep no
    state of the backend resource between calls.
    """

    def __init__(self, client: WaldurClient, config: DriverConfig, machine_name: str):
        """
        Initializes the runner.

        Args:
            client: The API client used for every request of this call.
            config: The machine's driver configuration.
            machine_name: The host's name for the machine, used in messages.
        """
        self.client = client
        self.config = config
        self.machine_name = machine_name

    def _check_status(
        self,
        response: ApiResponse,
        expected: int | tuple[int, ...],
        message: str,
        resource_uuid: str | None = None,
        error_class: type[BackendError] = BackendError,
    ) -> None:
        """
        Raises if the response status is not one of the expected codes.

        The raw response body goes to the error log only; the raised error
        carries the message and the status code.

        Args:
            response: The API response to check.
            expected: The success status code, or a tuple of them.
            message: A description of the failed operation,
                e.g. "Unable to start the instance vm-1 (uuid)".
            resource_uuid: The resource the request addressed, if any.
            error_class: The BackendError subclass to raise.
        """
        expected_codes = expected if isinstance(expected, tuple) else (expected,)
        if response.status_code in expected_codes:
            return

        logger.error(
            "%s, code %d, details: %s", message, response.status_code, response.text
        )
        raise error_class(
            f"{message}, code {response.status_code}",
            machine_name=self.machine_name,
            status_code=response.status_code,
            resource_uuid=resource_uuid,
        )
