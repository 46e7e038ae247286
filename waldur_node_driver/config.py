"""
Loading and validation of the driver configuration.

Options come from three places, in order of precedence: explicitly passed
option values (keyed by flag name, e.g. `waldur-api-url`), the equivalent
environment variables (`WALDUR_API_URL`), and the defaults of `DriverConfig`.
No network call happens here.
"""

import logging
import os
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import ValidationError

from .errors import ConfigurationError
from .helpers import ALL_OPTIONS, FIELD_TO_OPTION
from .models import DriverConfig

logger = logging.getLogger(__name__)

# Options that must be non-empty before a machine can be provisioned, in the
# order they are checked.
REQUIRED_OPTIONS = [
    "waldur-api-url",
    "waldur-api-token",
    "waldur-proj-uuid",
    "waldur-offering-uuid",
    "waldur-flavor-uuid",
    "waldur-image-uuid",
    "waldur-sys-volume-size",
    "waldur-sys-volume-type-uuid",
    "waldur-data-volume-type-uuid",
    "waldur-sec-group-uuid",
]


def _normalize_key(key: str) -> str:
    """Accepts `waldur-api-url`, `--waldur-api-url` and `waldur_api_url`."""
    return key.lstrip("-").replace("_", "-")


def collect_options(
    options: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """
    Merges explicit option values with environment variables and returns
    keyword arguments for `DriverConfig`.
    """
    environ = os.environ if environ is None else environ
    explicit = {_normalize_key(k): v for k, v in (options or {}).items()}

    values = {}
    for name, spec in ALL_OPTIONS.items():
        value = explicit.get(name)
        if value is None or value == "":
            value = environ.get(spec["env_var"])
        if value is not None:
            values[spec["field"]] = value
    return values


def build_config(values: Dict[str, Any]) -> DriverConfig:
    """Builds the model, reporting type errors by option name."""
    try:
        return DriverConfig(**values)
    except ValidationError as e:
        error = e.errors()[0]
        field_name = str(error["loc"][0]) if error["loc"] else ""
        option = FIELD_TO_OPTION.get(field_name, field_name)
        raise ConfigurationError(
            f"Invalid value for the --{option} option: {error['msg']}"
        ) from e


def validate_config(config: DriverConfig) -> None:
    """
    Fails with a ConfigurationError naming the first missing required option.
    Normalizes the subnet list to an empty list if it is unset.
    """
    present = {
        "waldur-api-url": config.api_url,
        "waldur-api-token": config.api_token.get_secret_value(),
        "waldur-proj-uuid": config.project_uuid,
        "waldur-offering-uuid": config.offering_uuid,
        "waldur-flavor-uuid": config.flavor_uuid,
        "waldur-image-uuid": config.image_uuid,
        "waldur-sys-volume-type-uuid": config.system_volume_type_uuid,
        "waldur-data-volume-type-uuid": config.data_volume_type_uuid,
        "waldur-sec-group-uuid": config.security_group_uuid,
    }
    for option in REQUIRED_OPTIONS:
        if option == "waldur-sys-volume-size":
            if config.system_volume_size <= 0:
                raise ConfigurationError(
                    "Waldur requires the --waldur-sys-volume-size option "
                    "to be a positive system volume size in GB"
                )
            continue
        if not present[option]:
            raise ConfigurationError(f"Waldur requires the --{option} option")

    if config.subnet_uuids is None:
        config.subnet_uuids = []


def load_config(
    options: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> DriverConfig:
    """Populates and validates a DriverConfig from options and environment."""
    config = build_config(collect_options(options, environ))
    validate_config(config)
    return config


def load_config_file(path: str) -> Dict[str, Any]:
    """
    Reads option values from a YAML mapping, e.g.::

        waldur-api-url: https://waldur.example.com
        waldur-subnet-uuids:
          - 6f0b...
    """
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file {path} must contain a mapping")
    logger.info("Loaded %d option(s) from %s", len(data), path)
    return data
