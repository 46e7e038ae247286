import logging

from .interfaces.runner import BaseRunner
from .resources import ResourceResolver

logger = logging.getLogger(__name__)

# Status codes meaning "accepted for asynchronous processing".
ACTION_ACCEPTED = 202
TERMINATION_ACCEPTED = (200, 201, 202)


class LifecycleController(BaseRunner):
    """
    Relays the host's lifecycle actions to the OpenStack instance behind a
    marketplace resource.

    Each action resolves the marketplace resource first and addresses the
    instance by the resource's own `resource_uuid`. An accepted action (202)
    is only queued by the backend; callers poll the state to see its effect.
    """

    ACTIONS = {
        "start": ("start_openstack_instance", "start"),
        "stop": ("stop_openstack_instance", "stop"),
        "restart": ("restart_openstack_instance", "restart"),
        # Waldur offers no separate force stop; kill falls back to stop.
        "kill": ("stop_openstack_instance", "force stop"),
    }

    def __init__(self, client, config, machine_name):
        super().__init__(client, config, machine_name)
        self.resolver = ResourceResolver(client, config, machine_name)

    def start(self) -> None:
        self._run_action("start")

    def stop(self) -> None:
        self._run_action("stop")

    def restart(self) -> None:
        self._run_action("restart")

    def kill(self) -> None:
        self._run_action("kill")

    def _run_action(self, action: str) -> None:
        client_method, verb = self.ACTIONS[action]
        resource_uuid = self.config.resource_uuid
        logger.info("Sending %s to instance %s", verb, self.machine_name)

        resource = self.resolver.resolve(resource_uuid)
        instance_uuid = self.resolver.parse_uuid(resource.get("resource_uuid"))

        response = getattr(self.client, client_method)(instance_uuid)
        self._check_status(
            response,
            ACTION_ACCEPTED,
            f"Unable to {verb} the instance {self.machine_name} ({resource_uuid})",
            resource_uuid=resource_uuid,
        )
        logger.info("Instance %s accepted the %s request", self.machine_name, verb)

    def remove(self) -> None:
        """
        Terminates the marketplace resource. Termination is itself an order and
        completes asynchronously.
        """
        resource_uuid = self.config.resource_uuid
        logger.info("Removing instance %s (%s)", self.machine_name, resource_uuid)
        parsed_uuid = self.resolver.parse_uuid(resource_uuid)
        response = self.client.terminate_marketplace_resource(parsed_uuid)
        if response.status_code == 404:
            logger.warning(
                "Marketplace resource %s of %s is already gone",
                resource_uuid,
                self.machine_name,
            )
            return

        self._check_status(
            response,
            TERMINATION_ACCEPTED,
            f"Unable to remove the instance {self.machine_name} ({resource_uuid})",
            resource_uuid=resource_uuid,
        )
        logger.info("Termination of instance %s has been accepted", self.machine_name)
