"""Tests for the AWS CloudWatch alarm client."""

from unittest.mock import patch, MagicMock
import pytest
from botocore.exceptions import ClientError, ConnectTimeoutError

from autostop.aws.alarms import Alarms
from autostop.base.config import AWSConfig
from autostop.base.exceptions import AlarmError, ProviderError, ProviderTimeoutError
from autostop.policy import build_idle_alarm


def _client_error(code: str, msg: str = "error") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": msg}}, "op")


@pytest.fixture
def svc():
    with patch("autostop.aws.alarms.boto3") as mock_boto:
        mock_client = MagicMock()
        mock_boto.client.return_value = mock_client
        instance = Alarms(AWSConfig(
            aws_access_key_id="key",
            aws_secret_access_key="secret",
            region_name="us-east-1",
        ))
        yield instance, mock_client


class TestPutAlarm:
    def test_success(self, svc):
        alarms, client = svc
        spec = build_idle_alarm("i-abc", "us-east-1")
        alarms.put_alarm(spec)
        kwargs = client.put_metric_alarm.call_args[1]
        assert kwargs["AlarmName"] == spec.name
        assert kwargs["AlarmActions"] == ["arn:aws:automate:us-east-1:ec2:stop"]
        assert kwargs["Dimensions"] == [{"Name": "InstanceId", "Value": "i-abc"}]
        assert kwargs["MetricName"] == "CPUUtilization"
        assert kwargs["Namespace"] == "AWS/EC2"
        assert kwargs["Statistic"] == "Average"
        assert kwargs["Period"] == 60
        assert kwargs["EvaluationPeriods"] == 5
        assert kwargs["DatapointsToAlarm"] == 5
        assert kwargs["Threshold"] == 5.0
        assert kwargs["ComparisonOperator"] == "LessThanThreshold"
        assert kwargs["TreatMissingData"] == "breaching"
        assert kwargs["ActionsEnabled"] is True

    def test_rejected(self, svc):
        alarms, client = svc
        client.put_metric_alarm.side_effect = _client_error("LimitExceeded", "Too many alarms")
        with pytest.raises(AlarmError, match="Too many alarms"):
            alarms.put_alarm(build_idle_alarm("i-abc", "us-east-1"))

    def test_alarm_error_is_provider_error(self, svc):
        alarms, client = svc
        client.put_metric_alarm.side_effect = _client_error("AccessDenied")
        with pytest.raises(ProviderError):
            alarms.put_alarm(build_idle_alarm("i-abc", "us-east-1"))

    def test_timeout(self, svc):
        alarms, client = svc
        client.put_metric_alarm.side_effect = ConnectTimeoutError(
            endpoint_url="https://monitoring.us-east-1.amazonaws.com"
        )
        with pytest.raises(ProviderTimeoutError):
            alarms.put_alarm(build_idle_alarm("i-abc", "us-east-1"))


class TestDeleteAlarms:
    def test_success(self, svc):
        alarms, client = svc
        alarms.delete_alarms(["a", "b"])
        client.delete_alarms.assert_called_once_with(AlarmNames=["a", "b"])

    def test_batches_of_100(self, svc):
        alarms, client = svc
        alarms.delete_alarms([f"alarm-{i}" for i in range(150)])
        assert client.delete_alarms.call_count == 2
        first, second = client.delete_alarms.call_args_list
        assert len(first[1]["AlarmNames"]) == 100
        assert len(second[1]["AlarmNames"]) == 50

    def test_error(self, svc):
        alarms, client = svc
        client.delete_alarms.side_effect = _client_error("ResourceNotFound")
        with pytest.raises(AlarmError):
            alarms.delete_alarms(["a"])
