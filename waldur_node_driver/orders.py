import logging
import time
import uuid
from typing import Any, Dict

from .errors import OrderError
from .helpers import build_uri
from .interfaces.runner import BaseRunner
from .models import ProvisioningOrder

logger = logging.getLogger(__name__)

# A map of transformation types to their corresponding functions.
TRANSFORMATION_MAP = {
    "gb_to_mb": lambda x: int(x) * 1024,
}

FAILED_ORDER_STATES = ("erred", "rejected", "canceled")


class OrderSubmitter(BaseRunner):
    """
    Provisions a machine through Waldur's asynchronous marketplace order
    workflow.

    The order is accepted synchronously (HTTP 201) and fulfilled in the
    background. The submitter links the machine to the marketplace resource
    the order creates by reading the order's `marketplace_resource_uuid`,
    polling the order when the reference is not there yet. The captured UUID
    is written to `config.resource_uuid`.
    """

    def build_attributes(self) -> Dict[str, Any]:
        """Builds the `attributes` mapping of an OpenStack instance order."""
        api_url = self.config.api_url
        ports = [
            {"subnet": build_uri(api_url, "subnet", subnet_uuid)}
            for subnet_uuid in self.config.subnet_uuids
        ]
        security_groups = [
            {
                "url": build_uri(
                    api_url, "security_group", self.config.security_group_uuid
                )
            }
        ]
        return {
            "name": self.machine_name,
            "flavor": build_uri(api_url, "flavor", self.config.flavor_uuid),
            "image": build_uri(api_url, "image", self.config.image_uuid),
            "system_volume_size": TRANSFORMATION_MAP["gb_to_mb"](
                self.config.system_volume_size
            ),
            "system_volume_type": build_uri(
                api_url, "volume_type", self.config.system_volume_type_uuid
            ),
            "data_volume_type": build_uri(
                api_url, "volume_type", self.config.data_volume_type_uuid
            ),
            "ports": ports,
            "security_groups": security_groups,
        }

    def build_order(self) -> ProvisioningOrder:
        api_url = self.config.api_url
        return ProvisioningOrder(
            offering=build_uri(api_url, "offering", self.config.offering_uuid),
            project=build_uri(api_url, "project", self.config.project_uuid),
            attributes=self.build_attributes(),
        )

    def submit(self) -> Dict[str, Any]:
        """
        Submits the order and captures the resulting resource UUID.

        Returns:
            The order as returned by the API (the last polled version, if the
            order had to be polled).
        """
        order = self.build_order()
        response = self.client.create_marketplace_order(order.to_payload())
        self._check_status(
            response, 201, f"Unable to create an instance {self.machine_name}"
        )
        logger.info("Order for instance %s has been accepted", self.machine_name)

        order_data = response.json() or {}
        self.config.order_uuid = order_data.get("uuid") or ""

        resource_uuid = order_data.get("marketplace_resource_uuid")
        if not resource_uuid and self.config.wait and self.config.order_uuid:
            order_data = self._wait_for_resource_reference(self.config.order_uuid)
            resource_uuid = order_data.get("marketplace_resource_uuid")

        if resource_uuid:
            self.config.resource_uuid = str(resource_uuid)
            logger.info(
                "Instance %s is linked to marketplace resource %s",
                self.machine_name,
                self.config.resource_uuid,
            )
        else:
            logger.warning(
                "Order %s of %s does not reference a marketplace resource yet",
                self.config.order_uuid or "(unknown)",
                self.machine_name,
            )
        return order_data

    def _wait_for_resource_reference(self, order_uuid: str) -> Dict[str, Any]:
        """
        Polls the order until it references its marketplace resource or
        reaches a failed terminal state. Only reads; the order is never
        resubmitted.
        """
        parsed_uuid = uuid.UUID(order_uuid)
        start_time = time.time()

        while time.time() - start_time < self.config.timeout:
            response = self.client.retrieve_marketplace_order(parsed_uuid)
            self._check_status(
                response,
                200,
                f"Unable to fetch the order {order_uuid} of {self.machine_name}",
            )
            order = response.json() or {}

            if order.get("marketplace_resource_uuid"):
                return order
            state = order.get("state")
            if state in FAILED_ORDER_STATES:
                raise OrderError(
                    f"Order {order_uuid} of {self.machine_name} finished with "
                    f"status '{state}'. Error message: {order.get('error_message')}",
                    machine_name=self.machine_name,
                )
            if state == "done":
                raise OrderError(
                    f"Order {order_uuid} of {self.machine_name} is done but "
                    "does not reference a marketplace resource",
                    machine_name=self.machine_name,
                )

            logger.info(
                "Waiting for order %s of %s, state %s", order_uuid, self.machine_name, state
            )
            time.sleep(self.config.interval)

        raise OrderError(
            f"Timeout waiting for order {order_uuid} of {self.machine_name} to complete.",
            machine_name=self.machine_name,
        )
