"""
The Waldur node driver.

`Driver` implements the fixed lifecycle contract a fleet-management host
expects from a machine driver (create, get_state, start, stop, restart, kill,
remove and a few accessors) on top of Waldur's asynchronous marketplace.

Every call builds a fresh API client and re-reads the backend; the only state
the driver keeps is its `DriverConfig`, which the host persists between calls.
"""

import logging
from typing import Any, Callable, Mapping, Optional

from .client import WaldurClient
from .config import load_config, validate_config
from .errors import ConfigurationError
from .helpers import DRIVER_NAME, build_uri
from .interfaces.host import MachineHost
from .lifecycle import LifecycleController
from .models import DriverConfig, State
from .orders import OrderSubmitter
from .resources import ResourceResolver
from .states import runtime_state_of, translate_state

logger = logging.getLogger(__name__)


class Driver:
    def __init__(
        self,
        host: MachineHost,
        config: Optional[DriverConfig] = None,
        client_factory: Callable[[DriverConfig], WaldurClient] = WaldurClient.from_config,
    ):
        """
        Args:
            host: The host helpers for this machine.
            config: A stored configuration; empty until set_config_from_options.
            client_factory: Builds the API client for each call.
        """
        self.host = host
        self.config = config or DriverConfig()
        self.client_factory = client_factory

    @property
    def machine_name(self) -> str:
        return self.host.machine_name

    def driver_name(self) -> str:
        return DRIVER_NAME

    def set_config_from_options(
        self,
        options: Optional[Mapping[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.config = load_config(options, environ)

    def _get_client(self) -> WaldurClient:
        try:
            return self.client_factory(self.config)
        except Exception as e:
            logger.error("Error creating Waldur client: %s", e)
            raise

    def pre_create_check(self) -> None:
        """Checks the configuration before create; makes no network call."""
        validate_config(self.config)
        if self.config.resource_uuid:
            raise ConfigurationError(
                f"Instance {self.machine_name} is already linked to marketplace "
                f"resource {self.config.resource_uuid}"
            )

    def create(self) -> None:
        """
        Orders a new instance. Returns once the order is accepted and, when
        waiting is enabled, linked to its marketplace resource; the instance
        itself may still be building.
        """
        logger.info("Creating instance for %s...", self.machine_name)
        validate_config(self.config)
        client = self._get_client()
        OrderSubmitter(client, self.config, self.machine_name).submit()
        logger.info("Successfully created instance %s", self.machine_name)

    def get_url(self) -> str:
        return build_uri(
            self.config.api_url, "marketplace_resource", self.config.resource_uuid
        )

    def get_state(self) -> State:
        client = self._get_client()
        resource = ResourceResolver(client, self.config, self.machine_name).resolve()
        runtime_state = runtime_state_of(resource)
        state = translate_state(runtime_state)
        logger.info(
            "Successfully fetched instance %s, runtime state %r, state %s",
            self.machine_name,
            runtime_state,
            state.value,
        )
        return state

    def _controller(self) -> LifecycleController:
        return LifecycleController(self._get_client(), self.config, self.machine_name)

    def start(self) -> None:
        self._controller().start()

    def stop(self) -> None:
        self._controller().stop()

    def restart(self) -> None:
        self._controller().restart()

    def kill(self) -> None:
        self._controller().kill()

    def remove(self) -> None:
        if not self.config.resource_uuid:
            logger.warning(
                "Instance %s is not linked to a marketplace resource, nothing to remove",
                self.machine_name,
            )
            return
        self._controller().remove()

    def get_ssh_hostname(self) -> str:
        return self.host.get_ip()
