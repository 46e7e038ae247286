import logging
import uuid
from typing import Any, Dict

from .interfaces.runner import BaseRunner

logger = logging.getLogger(__name__)


class ResourceResolver(BaseRunner):
    """Fetches the current marketplace resource of a machine from Waldur."""

    def parse_uuid(self, resource_uuid: str) -> uuid.UUID:
        try:
            return uuid.UUID(str(resource_uuid))
        except (ValueError, TypeError, AttributeError) as e:
            logger.error(
                "Error converting resource UUID string %r of %s to UUID object",
                resource_uuid,
                self.machine_name,
            )
            raise ValueError(
                f"Invalid resource UUID {resource_uuid!r} for {self.machine_name}"
            ) from e

    def resolve(self, resource_uuid: str | None = None) -> Dict[str, Any]:
        """
        Retrieves the marketplace resource in a single GET request.

        Args:
            resource_uuid: The resource to fetch. Defaults to the UUID stored
                in the configuration.

        Returns:
            The resource representation exactly as the API returned it.
        """
        resource_uuid = resource_uuid or self.config.resource_uuid
        parsed_uuid = self.parse_uuid(resource_uuid)

        response = self.client.retrieve_marketplace_resource(parsed_uuid)
        self._check_status(
            response,
            200,
            f"Unable to fetch the instance {self.machine_name} ({resource_uuid})",
            resource_uuid=resource_uuid,
        )
        return response.json()
