"""
This module defines the data structures shared by the driver components.

`DriverConfig` is the only persistent value: the host stores it between calls
(`model_dump()` / `DriverConfig(**data)`). Everything else lives for the
duration of a single lifecycle call.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, Field, SecretStr, field_validator

from .helpers import split_list


class State(str, Enum):
    """The abstract lifecycle states understood by the host."""

    NONE = "none"
    STARTING = "starting"
    RUNNING = "running"
    PAUSED = "paused"
    STOPPED = "stopped"
    ERROR = "error"


class DriverConfig(BaseModel):
    """
    Everything the driver needs to address and authenticate against Waldur.

    The model accepts incomplete values so that the host can rehydrate a
    stored configuration at any point of the machine lifecycle; the checks
    required before provisioning live in `config.validate_config`.
    """

    api_url: str = ""
    api_token: SecretStr = SecretStr("")
    project_uuid: str = ""
    offering_uuid: str = ""
    flavor_uuid: str = ""
    image_uuid: str = ""
    system_volume_size: int = 0  # GB
    system_volume_type_uuid: str = ""
    data_volume_type_uuid: str = ""
    subnet_uuids: List[str] = Field(default_factory=list)
    security_group_uuid: str = ""

    # Assigned once the marketplace order references its resource.
    resource_uuid: str = ""
    order_uuid: str = ""

    # Waiter and transport settings.
    wait: bool = True
    timeout: int = 600
    interval: int = 20
    request_timeout: int = 30
    validate_certs: bool = True

    @field_validator("subnet_uuids", mode="before")
    @classmethod
    def _normalize_subnets(cls, value):
        return split_list(value)

    @field_validator(
        "api_url",
        "project_uuid",
        "offering_uuid",
        "flavor_uuid",
        "image_uuid",
        "system_volume_type_uuid",
        "data_volume_type_uuid",
        "security_group_uuid",
        "resource_uuid",
        "order_uuid",
        mode="before",
    )
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value

    @field_validator("system_volume_size", mode="before")
    @classmethod
    def _none_to_zero(cls, value):
        return 0 if value in (None, "") else value

    def dump_for_storage(self) -> Dict[str, Any]:
        """Plain dict for the host's configuration store, token included."""
        data = self.model_dump()
        data["api_token"] = self.api_token.get_secret_value()
        return data


@dataclass
class ProvisioningOrder:
    """
    A marketplace order request. It is built for a single submission and never
    persisted.
    """

    offering: str
    project: str
    attributes: Dict[str, Any]
    limits: Dict[str, int] = field(default_factory=dict)
    accepting_terms_of_service: bool = True
    type: str = "Create"

    def to_payload(self) -> Dict[str, Any]:
        return {
            "offering": self.offering,
            "project": self.project,
            "attributes": self.attributes,
            "limits": self.limits,
            "accepting_terms_of_service": self.accepting_terms_of_service,
            "type": self.type,
        }


@dataclass(frozen=True)
class ApiResponse:
    """A raw answer of the Waldur API: status code plus undecoded body."""

    status_code: int
    body: bytes = b""

    @property
    def text(self) -> str:
        return self.body.decode(errors="ignore")

    def json(self) -> Any:
        """Decodes the body. An empty body decodes to None."""
        if not self.body:
            return None
        return json.loads(self.body)
