from unittest.mock import MagicMock

import pytest

from api_fixtures import API_URL, RESOURCE_UUID
from waldur_node_driver.client import WaldurClient
from waldur_node_driver.interfaces.host import StaticHost
from waldur_node_driver.models import DriverConfig


@pytest.fixture
def valid_options():
    """Option values that satisfy every required option."""
    return {
        "waldur-api-url": API_URL,
        "waldur-api-token": "b83557fd8e2066e98f27dee8f3b3433cdc4183ce",
        "waldur-proj-uuid": "11111111111111111111111111111111",
        "waldur-offering-uuid": "22222222222222222222222222222222",
        "waldur-flavor-uuid": "33333333333333333333333333333333",
        "waldur-image-uuid": "44444444444444444444444444444444",
        "waldur-sys-volume-size": 20,
        "waldur-sys-volume-type-uuid": "55555555555555555555555555555555",
        "waldur-data-volume-type-uuid": "66666666666666666666666666666666",
        "waldur-sec-group-uuid": "77777777777777777777777777777777",
        "waldur-subnet-uuids": [
            "88888888888888888888888888888888",
            "99999999999999999999999999999999",
        ],
    }


@pytest.fixture
def driver_config():
    """A complete configuration of an already provisioned machine."""
    return DriverConfig(
        api_url=API_URL,
        api_token="b83557fd8e2066e98f27dee8f3b3433cdc4183ce",
        project_uuid="11111111111111111111111111111111",
        offering_uuid="22222222222222222222222222222222",
        flavor_uuid="33333333333333333333333333333333",
        image_uuid="44444444444444444444444444444444",
        system_volume_size=20,
        system_volume_type_uuid="55555555555555555555555555555555",
        data_volume_type_uuid="66666666666666666666666666666666",
        security_group_uuid="77777777777777777777777777777777",
        subnet_uuids=["88888888888888888888888888888888"],
        resource_uuid=RESOURCE_UUID,
        interval=0,
        timeout=5,
    )


@pytest.fixture
def mock_client():
    """
    A mocked WaldurClient. Tests set the return values of the typed
    operations they expect to be called.
    """
    return MagicMock(spec=WaldurClient)


@pytest.fixture
def host():
    return StaticHost("vm-01", ip_address="192.0.2.10")
