"""
Tests for AWS-facing helpers: the CloudFormation event feed and usage plan cleanup.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock, Mock, patch

import pytest
from botocore.exceptions import ClientError

from stackmon.cleanup import disassociate_usage_plan
from stackmon.feed import CloudFormationEventFeed, error_message, is_stack_missing


class TestCloudFormationEventFeed:
    """Test the boto3 event feed."""

    def test_describe_events(self):
        client = Mock()
        now = datetime.now(timezone.utc)
        client.describe_stack_events.return_value = {
            "StackEvents": [
                {
                    "EventId": "2",
                    "StackName": "svc",
                    "LogicalResourceId": "svc",
                    "ResourceType": "AWS::CloudFormation::Stack",
                    "ResourceStatus": "CREATE_COMPLETE",
                    "Timestamp": now,
                },
                {
                    "EventId": "1",
                    "StackName": "svc",
                    "LogicalResourceId": "svc",
                    "ResourceType": "AWS::CloudFormation::Stack",
                    "ResourceStatus": "CREATE_IN_PROGRESS",
                    "ResourceStatusReason": "User Initiated",
                    "Timestamp": now,
                },
            ]
        }

        events = CloudFormationEventFeed(client=client).describe_events("svc")

        client.describe_stack_events.assert_called_once_with(StackName="svc")
        assert [e.event_id for e in events] == ["2", "1"]
        assert events[1].status_reason == "User Initiated"
        assert events[0].timestamp == now

    def test_lazy_client(self):
        with patch("stackmon.feed.boto3.client") as mock_client:
            mock_client.return_value.describe_stack_events.return_value = {"StackEvents": []}
            feed = CloudFormationEventFeed(region="us-east-1")
            mock_client.assert_not_called()

            assert feed.describe_events("svc") == []
            feed.describe_events("svc")

        mock_client.assert_called_once_with("cloudformation", region_name="us-east-1")

    def test_client_error_propagates(self):
        client = Mock()
        client.describe_stack_events.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "nope"}}, "DescribeStackEvents"
        )

        with pytest.raises(ClientError):
            CloudFormationEventFeed(client=client).describe_events("svc")


class TestErrorMessages:
    """Test extraction of feed error messages."""

    def test_client_error_message(self):
        error = ClientError(
            {"Error": {"Code": "ValidationError", "Message": "Stack with id svc does not exist"}},
            "DescribeStackEvents",
        )
        assert error_message(error) == "Stack with id svc does not exist"
        assert is_stack_missing(error)

    def test_plain_error(self):
        assert error_message(RuntimeError("boom")) == "boom"
        assert not is_stack_missing(RuntimeError("boom"))


class TestDisassociateUsagePlan:
    """Test removal of usage plan stage associations."""

    def _clients(self):
        cfn = MagicMock()
        cfn.describe_stack_resource.return_value = {
            "StackResourceDetail": {"PhysicalResourceId": "resource-id"}
        }
        apigw = MagicMock()
        apigw.get_paginator.return_value.paginate.return_value = [
            {"items": [{"id": "plan-1", "apiStages": [{"apiId": "resource-id", "stage": "dev"}]}]},
            {"items": [{"id": "plan-2", "apiStages": [{"apiId": "other-id", "stage": "prod"}]}]},
        ]
        return cfn, apigw

    def test_removes_matching_stages(self):
        cfn, apigw = self._clients()

        requests = disassociate_usage_plan("svc-dev", ["key"], cfn_client=cfn, apigw_client=apigw)

        cfn.describe_stack_resource.assert_called_once_with(
            StackName="svc-dev", LogicalResourceId="ApiGatewayRestApi"
        )
        apigw.update_usage_plan.assert_called_once_with(
            usagePlanId="plan-1",
            patchOperations=[{"op": "remove", "path": "/apiStages", "value": "resource-id:dev"}],
        )
        assert len(requests) == 1

    def test_noop_without_api_keys(self):
        cfn, apigw = self._clients()

        assert disassociate_usage_plan("svc-dev", [], cfn_client=cfn, apigw_client=apigw) == []
        assert disassociate_usage_plan("svc-dev", None, cfn_client=cfn, apigw_client=apigw) == []

        cfn.describe_stack_resource.assert_not_called()
        apigw.get_paginator.assert_not_called()

    def test_custom_logical_id(self):
        cfn, apigw = self._clients()

        disassociate_usage_plan("svc-dev", ["key"], cfn_client=cfn, apigw_client=apigw,
                                rest_api_logical_id="MyApi")

        cfn.describe_stack_resource.assert_called_once_with(StackName="svc-dev", LogicalResourceId="MyApi")

    def test_matching_plan_on_later_page(self):
        cfn, apigw = self._clients()
        apigw.get_paginator.return_value.paginate.return_value = [
            {"items": [{"id": "plan-1", "apiStages": [{"apiId": "other-id", "stage": "prod"}]}]},
            {"items": []},
            {"items": [{"id": "plan-9", "apiStages": [{"apiId": "resource-id", "stage": "dev"}]}]},
        ]

        requests = disassociate_usage_plan("svc-dev", ["key"], cfn_client=cfn, apigw_client=apigw)

        apigw.get_paginator.assert_called_once_with("get_usage_plans")
        apigw.update_usage_plan.assert_called_once_with(
            usagePlanId="plan-9",
            patchOperations=[{"op": "remove", "path": "/apiStages", "value": "resource-id:dev"}],
        )
        assert [r["usagePlanId"] for r in requests] == ["plan-9"]
