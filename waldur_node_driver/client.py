"""
A small typed client for the parts of the Waldur REST API the driver uses.

Requests go through Ansible's `Request` helper, the same HTTP layer the
Waldur Ansible modules use. HTTP error statuses come back as `ApiResponse`
values so callers can decide what a given status means; transport failures
(connection errors, TLS problems, timeouts) propagate unchanged.
"""

import json
import logging
from typing import Any, Dict, Optional
from urllib.error import HTTPError
from uuid import UUID

from ansible.module_utils.urls import Request

from .models import ApiResponse, DriverConfig

logger = logging.getLogger(__name__)


class TokenAuth:
    """Attaches the Waldur token header to every outgoing request."""

    def __init__(self, token: str):
        if not token:
            raise ValueError("Waldur API token must not be empty")
        self.token = token

    def intercept(self, headers: Dict[str, str]) -> Dict[str, str]:
        headers["Authorization"] = f"token {self.token}"
        return headers


class WaldurClient:
    def __init__(
        self,
        api_url: str,
        auth: TokenAuth,
        timeout: int = 30,
        validate_certs: bool = True,
    ):
        if not api_url:
            raise ValueError("Waldur API URL must not be empty")
        self.api_url = api_url.rstrip("/")
        self.auth = auth
        self.timeout = timeout
        self.request = Request(timeout=timeout, validate_certs=validate_certs)

    @classmethod
    def from_config(cls, config: DriverConfig) -> "WaldurClient":
        auth = TokenAuth(config.api_token.get_secret_value())
        return cls(
            config.api_url,
            auth,
            timeout=config.request_timeout,
            validate_certs=config.validate_certs,
        )

    def send_request(
        self,
        method: str,
        path: str,
        data: Optional[Any] = None,
        path_params: Optional[Dict[str, Any]] = None,
    ) -> ApiResponse:
        """
        Sends a single request and returns its status and raw body.

        Args:
            method: The HTTP method.
            path: The API path, e.g. "/api/marketplace-orders/{uuid}/".
            data: A JSON-serializable request body.
            path_params: Values substituted into the path template.
        """
        if path_params:
            path = path.format(**path_params)
        url = f"{self.api_url}/{path.lstrip('/')}"

        headers = self.auth.intercept({"Content-Type": "application/json"})
        body = json.dumps(data).encode() if data is not None else None

        logger.debug("%s %s", method, url)
        try:
            response = self.request.open(method, url, data=body, headers=headers)
        except HTTPError as e:
            # urllib reports 4xx/5xx answers as exceptions; they are valid
            # API responses for our purposes.
            return ApiResponse(status_code=e.code, body=e.read() or b"")

        return ApiResponse(status_code=response.getcode(), body=response.read())

    def retrieve_marketplace_resource(self, resource_uuid: UUID) -> ApiResponse:
        return self.send_request(
            "GET",
            "/api/marketplace-resources/{uuid}/",
            path_params={"uuid": resource_uuid.hex},
        )

    def terminate_marketplace_resource(
        self, resource_uuid: UUID, attributes: Optional[Dict[str, Any]] = None
    ) -> ApiResponse:
        payload = {"attributes": attributes} if attributes else {}
        return self.send_request(
            "POST",
            "/api/marketplace-resources/{uuid}/terminate/",
            data=payload,
            path_params={"uuid": resource_uuid.hex},
        )

    def create_marketplace_order(self, payload: Dict[str, Any]) -> ApiResponse:
        return self.send_request("POST", "/api/marketplace-orders/", data=payload)

    def retrieve_marketplace_order(self, order_uuid: UUID) -> ApiResponse:
        return self.send_request(
            "GET",
            "/api/marketplace-orders/{uuid}/",
            path_params={"uuid": order_uuid.hex},
        )

    def start_openstack_instance(self, instance_uuid: UUID) -> ApiResponse:
        return self._instance_action(instance_uuid, "start")

    def stop_openstack_instance(self, instance_uuid: UUID) -> ApiResponse:
        return self._instance_action(instance_uuid, "stop")

    def restart_openstack_instance(self, instance_uuid: UUID) -> ApiResponse:
        return self._instance_action(instance_uuid, "restart")

    def _instance_action(self, instance_uuid: UUID, action: str) -> ApiResponse:
        return self.send_request(
            "POST",
            "/api/openstack-instances/{uuid}/{action}/",
            path_params={"uuid": instance_uuid.hex, "action": action},
        )
