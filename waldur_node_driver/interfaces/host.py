from abc import ABC, abstractmethod


class MachineHost(ABC):
    """
    The helpers the fleet-management host provides to the driver.

    The host owns machine registration, SSH bootstrapping and the storage of
    the driver configuration. The driver only calls out to it where it needs
    host knowledge, such as the address the machine is reachable at.
    """

    @property
    @abstractmethod
    def machine_name(self) -> str:
        """The name the host registered the machine under."""
        pass

    @abstractmethod
    def get_ip(self) -> str:
        """Returns the IP address the host reaches the machine at."""
        pass


class StaticHost(MachineHost):
    """A MachineHost with fixed values, for hosts that know the IP up front."""

    def __init__(self, machine_name: str, ip_address: str = ""):
        self._machine_name = machine_name
        self.ip_address = ip_address

    @property
    def machine_name(self) -> str:
        return self._machine_name

    def get_ip(self) -> str:
        if not self.ip_address:
            raise ValueError(f"IP address of {self._machine_name} is not known yet")
        return self.ip_address
