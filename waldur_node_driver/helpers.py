"""Shared helper functions and constants."""

DRIVER_NAME = "waldur"

# Every option the driver recognizes. Keys are the option flags (without the
# leading dashes); each entry names the equivalent environment variable and
# the DriverConfig field it populates.
DRIVER_OPTIONS = {
    "waldur-api-url": {
        "description": "Waldur API URL",
        "env_var": "WALDUR_API_URL",
        "field": "api_url",
        "type": "str",
    },
    "waldur-api-token": {
        "description": "Waldur API token",
        "env_var": "WALDUR_API_TOKEN",
        "field": "api_token",
        "type": "str",
        "no_log": True,  # Sensitive information, do not log
    },
    "waldur-proj-uuid": {
        "description": "UUID of the project in Waldur",
        "env_var": "WALDUR_PROJ_UUID",
        "field": "project_uuid",
        "type": "str",
    },
    "waldur-offering-uuid": {
        "description": "UUID of the VM offering in Waldur",
        "env_var": "WALDUR_OFFERING_UUID",
        "field": "offering_uuid",
        "type": "str",
    },
    "waldur-flavor-uuid": {
        "description": "UUID of the VM flavor in Waldur",
        "env_var": "WALDUR_FLAVOR_UUID",
        "field": "flavor_uuid",
        "type": "str",
    },
    "waldur-image-uuid": {
        "description": "UUID of the VM image in Waldur",
        "env_var": "WALDUR_IMAGE_UUID",
        "field": "image_uuid",
        "type": "str",
    },
    "waldur-sys-volume-size": {
        "description": "System volume size for Waldur VM (GB)",
        "env_var": "WALDUR_SYS_VOLUME_SIZE",
        "field": "system_volume_size",
        "type": "int",
    },
    "waldur-sys-volume-type-uuid": {
        "description": "UUID of the system volume type in Waldur",
        "env_var": "WALDUR_SYS_VOLUME_TYPE_UUID",
        "field": "system_volume_type_uuid",
        "type": "str",
    },
    "waldur-data-volume-type-uuid": {
        "description": "UUID of the data volume type in Waldur",
        "env_var": "WALDUR_DATA_VOLUME_TYPE_UUID",
        "field": "data_volume_type_uuid",
        "type": "str",
    },
    "waldur-sec-group-uuid": {
        "description": "UUID of the security group in Waldur",
        "env_var": "WALDUR_SEC_GROUP_UUID",
        "field": "security_group_uuid",
        "type": "str",
    },
    "waldur-subnet-uuids": {
        "description": "List of UUIDs of subnets in Waldur",
        "env_var": "WALDUR_SUBNET_UUIDS",
        "field": "subnet_uuids",
        "type": "list",
    },
    "waldur-resource-uuid": {
        "description": "UUID of an already provisioned marketplace resource",
        "env_var": "WALDUR_RESOURCE_UUID",
        "field": "resource_uuid",
        "type": "str",
    },
}

WAITER_OPTIONS = {
    "waldur-wait": {
        "description": "Wait for the order to reference its marketplace resource.",
        "env_var": "WALDUR_WAIT",
        "field": "wait",
        "type": "bool",
        "default": True,
    },
    "waldur-timeout": {
        "description": "The maximum number of seconds to wait for the order.",
        "env_var": "WALDUR_TIMEOUT",
        "field": "timeout",
        "type": "int",
        "default": 600,
    },
    "waldur-interval": {
        "description": "The interval in seconds for polling the order status.",
        "env_var": "WALDUR_INTERVAL",
        "field": "interval",
        "type": "int",
        "default": 20,
    },
    "waldur-request-timeout": {
        "description": "The timeout in seconds of a single API request.",
        "env_var": "WALDUR_REQUEST_TIMEOUT",
        "field": "request_timeout",
        "type": "int",
        "default": 30,
    },
    "waldur-validate-certs": {
        "description": "Whether to validate the TLS certificate of the API.",
        "env_var": "WALDUR_VALIDATE_CERTS",
        "field": "validate_certs",
        "type": "bool",
        "default": True,
    },
}

ALL_OPTIONS = {**DRIVER_OPTIONS, **WAITER_OPTIONS}

# Maps DriverConfig field names back to the option flag, for error messages.
FIELD_TO_OPTION = {spec["field"]: name for name, spec in ALL_OPTIONS.items()}

# Resource-path convention of the Waldur API, keyed by object kind.
RESOURCE_PATHS = {
    "project": "/api/projects/{uuid}/",
    "offering": "/api/marketplace-public-offerings/{uuid}/",
    "flavor": "/api/openstack-flavors/{uuid}/",
    "image": "/api/openstack-images/{uuid}/",
    "volume_type": "/api/openstack-volume-types/{uuid}/",
    "subnet": "/api/openstack-subnets/{uuid}/",
    "security_group": "/api/openstack-security-groups/{uuid}/",
    "marketplace_resource": "/api/marketplace-resources/{uuid}/",
    "marketplace_order": "/api/marketplace-orders/{uuid}/",
}


def build_uri(api_url: str, kind: str, uuid: str) -> str:
    """Formats the absolute API URL of an object of the given kind."""
    path = RESOURCE_PATHS[kind].format(uuid=uuid)
    return f"{api_url.rstrip('/')}{path}"


def split_list(value) -> list[str]:
    """Normalizes a list option: None becomes [], a string is split on commas."""
    if value is None:
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return [str(item) for item in value]

