"""Tests for the AWS EC2 compute client."""

from unittest.mock import patch, MagicMock
import pytest
from botocore.exceptions import (
    ClientError,
    EndpointConnectionError,
    ReadTimeoutError,
)

from autostop.aws.compute import Compute
from autostop.base.config import AWSConfig
from autostop.base.exceptions import (
    InstanceNotFoundError,
    ProviderError,
    ProviderTimeoutError,
    UnsupportedOperationError,
)


def _client_error(code: str, msg: str = "error") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": msg}}, "op")


def _page(*instances: dict) -> dict:
    return {"Reservations": [{"Instances": list(instances)}]}


@pytest.fixture
def svc():
    with patch("autostop.aws.compute.boto3") as mock_boto:
        mock_client = MagicMock()
        mock_boto.client.return_value = mock_client
        instance = Compute(AWSConfig(
            aws_access_key_id="key",
            aws_secret_access_key="secret",
            region_name="us-east-1",
        ))
        yield instance, mock_client


class TestClientConstruction:
    def test_timeout_and_no_retries(self):
        with patch("autostop.aws.compute.boto3") as mock_boto:
            Compute(AWSConfig(region_name="eu-west-1", request_timeout=12))
        args, kwargs = mock_boto.client.call_args
        assert args == ("ec2",)
        assert kwargs["region_name"] == "eu-west-1"
        assert kwargs["config"].connect_timeout == 12
        assert kwargs["config"].read_timeout == 12
        assert kwargs["config"].retries == {"total_max_attempts": 1}


# --- start / stop / terminate ---

class TestInstanceLifecycle:
    def test_start_success(self, svc):
        inst, client = svc
        inst.start_instance("i-abc")
        client.start_instances.assert_called_once_with(InstanceIds=["i-abc"])

    def test_stop_success(self, svc):
        inst, client = svc
        inst.stop_instance("i-abc")
        client.stop_instances.assert_called_once_with(InstanceIds=["i-abc"])

    def test_terminate_success(self, svc):
        inst, client = svc
        inst.terminate_instance("i-abc")
        client.terminate_instances.assert_called_once_with(InstanceIds=["i-abc"])

    def test_start_not_found(self, svc):
        inst, client = svc
        client.start_instances.side_effect = _client_error("InvalidInstanceID.NotFound")
        with pytest.raises(InstanceNotFoundError):
            inst.start_instance("i-missing")

    def test_stop_unsupported(self, svc):
        inst, client = svc
        client.stop_instances.side_effect = _client_error(
            "UnsupportedOperation", "You can't stop the Spot Instance"
        )
        with pytest.raises(UnsupportedOperationError, match="can't stop the Spot"):
            inst.stop_instance("i-spot")

    def test_unsupported_is_a_provider_error(self, svc):
        inst, client = svc
        client.stop_instances.side_effect = _client_error("UnsupportedOperation")
        with pytest.raises(ProviderError):
            inst.stop_instance("i-abc")

    def test_terminate_generic(self, svc):
        inst, client = svc
        client.terminate_instances.side_effect = _client_error(
            "UnauthorizedOperation", "You are not authorized"
        )
        with pytest.raises(ProviderError, match="not authorized"):
            inst.terminate_instance("i-abc")

    def test_read_timeout(self, svc):
        inst, client = svc
        client.start_instances.side_effect = ReadTimeoutError(
            endpoint_url="https://ec2.us-east-1.amazonaws.com"
        )
        with pytest.raises(ProviderTimeoutError):
            inst.start_instance("i-abc")

    def test_connection_failure(self, svc):
        inst, client = svc
        client.start_instances.side_effect = EndpointConnectionError(
            endpoint_url="https://ec2.us-east-1.amazonaws.com"
        )
        with pytest.raises(ProviderError) as exc_info:
            inst.start_instance("i-abc")
        assert not isinstance(exc_info.value, ProviderTimeoutError)


# --- list_instances ---

class TestListInstances:
    def test_follows_every_page(self, svc):
        inst, client = svc
        client.get_paginator.return_value.paginate.return_value = [
            _page({"InstanceId": "i-1", "State": {"Name": "running"}}),
            _page(
                {"InstanceId": "i-2", "State": {"Name": "stopped"}},
                {"InstanceId": "i-3", "State": {"Name": "pending"}},
            ),
        ]
        result = inst.list_instances()
        client.get_paginator.assert_called_once_with("describe_instances")
        assert [r.instance_id for r in result] == ["i-1", "i-2", "i-3"]

    def test_record_fields(self, svc):
        inst, client = svc
        client.get_paginator.return_value.paginate.return_value = [
            _page({
                "InstanceId": "i-1",
                "State": {"Name": "running"},
                "InstanceType": "t3.micro",
                "Tags": [{"Key": "Env", "Value": "dev"}, {"Key": "Name", "Value": "web"}],
                "PublicIpAddress": "1.2.3.4",
                "PrivateIpAddress": "10.0.0.1",
                "InstanceLifecycle": "spot",
                "SpotInstanceRequestId": "sir-123",
                "Platform": "windows",
                "LaunchTime": "2024-01-01T00:00:00Z",
            })
        ]
        record = inst.list_instances()[0]
        assert record.name_tag() == "web"
        assert record.state == "running"
        assert record.instance_type == "t3.micro"
        assert record.public_ip == "1.2.3.4"
        assert record.private_ip == "10.0.0.1"
        assert record.is_spot
        assert record.platform == "windows"
        assert record.launch_time.year == 2024

    def test_empty(self, svc):
        inst, client = svc
        client.get_paginator.return_value.paginate.return_value = [{"Reservations": []}]
        assert inst.list_instances() == []

    def test_no_tags(self, svc):
        inst, client = svc
        client.get_paginator.return_value.paginate.return_value = [
            _page({"InstanceId": "i-1", "State": {"Name": "running"}})
        ]
        record = inst.list_instances()[0]
        assert record.name_tag() is None
        assert not record.is_spot

    def test_error(self, svc):
        inst, client = svc
        client.get_paginator.return_value.paginate.side_effect = _client_error("AuthFailure")
        with pytest.raises(ProviderError):
            inst.list_instances()


# --- describe_instances ---

class TestDescribeInstances:
    def test_success(self, svc):
        inst, client = svc
        client.describe_instances.return_value = _page(
            {"InstanceId": "i-1", "State": {"Name": "stopped"}, "SpotInstanceRequestId": "sir-9"}
        )
        result = inst.describe_instances(["i-1"])
        client.describe_instances.assert_called_once_with(InstanceIds=["i-1"])
        assert result[0].instance_id == "i-1"
        assert result[0].is_spot

    def test_no_reservations(self, svc):
        inst, client = svc
        client.describe_instances.return_value = {"Reservations": []}
        assert inst.describe_instances(["i-1"]) == []

    def test_not_found(self, svc):
        inst, client = svc
        client.describe_instances.side_effect = _client_error("InvalidInstanceID.NotFound")
        with pytest.raises(InstanceNotFoundError):
            inst.describe_instances(["i-missing"])

    def test_malformed_id(self, svc):
        inst, client = svc
        client.describe_instances.side_effect = _client_error("InvalidInstanceID.Malformed")
        with pytest.raises(InstanceNotFoundError):
            inst.describe_instances(["nope"])
