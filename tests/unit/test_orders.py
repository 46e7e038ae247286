import logging
import uuid
from unittest.mock import patch

import pytest

from api_fixtures import API_URL, ORDER_UUID, RESOURCE_UUID, make_response
from waldur_node_driver.errors import BackendError, OrderError
from waldur_node_driver.orders import OrderSubmitter


@pytest.fixture
def new_machine_config(driver_config):
    """A configuration of a machine that has not been provisioned yet."""
    driver_config.resource_uuid = ""
    return driver_config


class TestOrderPayload:
    def test_payload_uses_resource_paths(self, mock_client, new_machine_config):
        submitter = OrderSubmitter(mock_client, new_machine_config, "vm-01")

        payload = submitter.build_order().to_payload()

        assert payload == {
            "offering": f"{API_URL}/api/marketplace-public-offerings/22222222222222222222222222222222/",
            "project": f"{API_URL}/api/projects/11111111111111111111111111111111/",
            "attributes": {
                "name": "vm-01",
                "flavor": f"{API_URL}/api/openstack-flavors/33333333333333333333333333333333/",
                "image": f"{API_URL}/api/openstack-images/44444444444444444444444444444444/",
                "system_volume_size": 20 * 1024,
                "system_volume_type": f"{API_URL}/api/openstack-volume-types/55555555555555555555555555555555/",
                "data_volume_type": f"{API_URL}/api/openstack-volume-types/66666666666666666666666666666666/",
                "ports": [
                    {
                        "subnet": f"{API_URL}/api/openstack-subnets/88888888888888888888888888888888/"
                    }
                ],
                "security_groups": [
                    {
                        "url": f"{API_URL}/api/openstack-security-groups/77777777777777777777777777777777/"
                    }
                ],
            },
            "limits": {},
            "accepting_terms_of_service": True,
            "type": "Create",
        }

    def test_no_subnets_give_empty_ports(self, mock_client, new_machine_config):
        new_machine_config.subnet_uuids = []
        submitter = OrderSubmitter(mock_client, new_machine_config, "vm-01")

        assert submitter.build_attributes()["ports"] == []

    def test_subnets_keep_their_order(self, mock_client, new_machine_config):
        new_machine_config.subnet_uuids = ["b", "a", "c"]
        submitter = OrderSubmitter(mock_client, new_machine_config, "vm-01")

        ports = submitter.build_attributes()["ports"]

        assert [p["subnet"].rstrip("/").split("/")[-1] for p in ports] == [
            "b",
            "a",
            "c",
        ]


class TestOrderSubmission:
    def test_accepted_order_with_resource_reference(
        self, mock_client, new_machine_config
    ):
        mock_client.create_marketplace_order.return_value = make_response(
            201, {"uuid": ORDER_UUID, "marketplace_resource_uuid": RESOURCE_UUID}
        )
        submitter = OrderSubmitter(mock_client, new_machine_config, "vm-01")

        order = submitter.submit()

        assert order["uuid"] == ORDER_UUID
        assert new_machine_config.order_uuid == ORDER_UUID
        assert new_machine_config.resource_uuid == RESOURCE_UUID
        mock_client.retrieve_marketplace_order.assert_not_called()

    @pytest.mark.parametrize("status_code", [200, 202, 400, 403, 500])
    def test_non_201_status_fails(
        self, mock_client, new_machine_config, status_code, caplog
    ):
        mock_client.create_marketplace_order.return_value = make_response(
            status_code, body=b"offering is not available"
        )
        submitter = OrderSubmitter(mock_client, new_machine_config, "vm-01")

        with caplog.at_level(logging.ERROR):
            with pytest.raises(BackendError) as exc_info:
                submitter.submit()

        message = str(exc_info.value)
        assert "vm-01" in message
        assert str(status_code) in message
        assert "offering is not available" not in message
        assert exc_info.value.status_code == status_code
        assert "offering is not available" in caplog.text
        assert new_machine_config.resource_uuid == ""

    def test_transport_error_propagates(self, mock_client, new_machine_config):
        mock_client.create_marketplace_order.side_effect = ConnectionError("refused")
        submitter = OrderSubmitter(mock_client, new_machine_config, "vm-01")

        with pytest.raises(ConnectionError):
            submitter.submit()

    @patch("waldur_node_driver.orders.time")
    def test_polls_order_until_resource_is_referenced(
        self, mock_time, mock_client, new_machine_config
    ):
        mock_time.time.return_value = 0
        mock_client.create_marketplace_order.return_value = make_response(
            201, {"uuid": ORDER_UUID, "state": "pending-consumer"}
        )
        mock_client.retrieve_marketplace_order.side_effect = [
            make_response(200, {"uuid": ORDER_UUID, "state": "executing"}),
            make_response(
                200,
                {
                    "uuid": ORDER_UUID,
                    "state": "executing",
                    "marketplace_resource_uuid": RESOURCE_UUID,
                },
            ),
        ]
        submitter = OrderSubmitter(mock_client, new_machine_config, "vm-01")

        submitter.submit()

        assert new_machine_config.resource_uuid == RESOURCE_UUID
        assert mock_client.retrieve_marketplace_order.call_count == 2
        mock_client.retrieve_marketplace_order.assert_called_with(uuid.UUID(ORDER_UUID))
        mock_client.create_marketplace_order.assert_called_once()
        mock_time.sleep.assert_called_once_with(0)

    @pytest.mark.parametrize("state", ["erred", "rejected", "canceled"])
    def test_failed_order_raises(self, mock_client, new_machine_config, state):
        mock_client.create_marketplace_order.return_value = make_response(
            201, {"uuid": ORDER_UUID}
        )
        mock_client.retrieve_marketplace_order.return_value = make_response(
            200, {"uuid": ORDER_UUID, "state": state, "error_message": "No quota"}
        )
        submitter = OrderSubmitter(mock_client, new_machine_config, "vm-01")

        with pytest.raises(OrderError, match=state) as exc_info:
            submitter.submit()

        assert "No quota" in str(exc_info.value)
        assert new_machine_config.resource_uuid == ""

    def test_done_order_without_reference_raises(
        self, mock_client, new_machine_config
    ):
        mock_client.create_marketplace_order.return_value = make_response(
            201, {"uuid": ORDER_UUID}
        )
        mock_client.retrieve_marketplace_order.return_value = make_response(
            200, {"uuid": ORDER_UUID, "state": "done"}
        )
        submitter = OrderSubmitter(mock_client, new_machine_config, "vm-01")

        with pytest.raises(OrderError, match="does not reference"):
            submitter.submit()

    def test_order_poll_rejection_raises(self, mock_client, new_machine_config):
        mock_client.create_marketplace_order.return_value = make_response(
            201, {"uuid": ORDER_UUID}
        )
        mock_client.retrieve_marketplace_order.return_value = make_response(
            404, body=b"Not found."
        )
        submitter = OrderSubmitter(mock_client, new_machine_config, "vm-01")

        with pytest.raises(BackendError, match="code 404"):
            submitter.submit()

    @patch("waldur_node_driver.orders.time")
    def test_timeout_raises(self, mock_time, mock_client, new_machine_config):
        new_machine_config.timeout = 60
        mock_time.time.side_effect = [0, 0, 30, 61]
        mock_client.create_marketplace_order.return_value = make_response(
            201, {"uuid": ORDER_UUID}
        )
        mock_client.retrieve_marketplace_order.return_value = make_response(
            200, {"uuid": ORDER_UUID, "state": "executing"}
        )
        submitter = OrderSubmitter(mock_client, new_machine_config, "vm-01")

        with pytest.raises(OrderError, match="Timeout"):
            submitter.submit()

        assert mock_client.retrieve_marketplace_order.call_count == 2
        mock_client.create_marketplace_order.assert_called_once()

    def test_no_wait_leaves_resource_unlinked(
        self, mock_client, new_machine_config, caplog
    ):
        new_machine_config.wait = False
        mock_client.create_marketplace_order.return_value = make_response(
            201, {"uuid": ORDER_UUID}
        )
        submitter = OrderSubmitter(mock_client, new_machine_config, "vm-01")

        with caplog.at_level(logging.WARNING):
            submitter.submit()

        assert new_machine_config.order_uuid == ORDER_UUID
        assert new_machine_config.resource_uuid == ""
        mock_client.retrieve_marketplace_order.assert_not_called()
        assert "does not reference a marketplace resource" in caplog.text
