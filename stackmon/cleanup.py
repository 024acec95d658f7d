"""
Cleanup calls made around stack operations.
"""

import logging
from typing import Any, Dict, Iterator, List, Optional, Sequence

import boto3

logger = logging.getLogger(__name__)

DEFAULT_REST_API_LOGICAL_ID = "ApiGatewayRestApi"


def disassociate_usage_plan(
    stack_name: str,
    api_keys: Optional[Sequence[Any]],
    cfn_client=None,
    apigw_client=None,
    rest_api_logical_id: str = DEFAULT_REST_API_LOGICAL_ID,
    region: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Remove the stack's REST API stages from every usage plan that references them.

    API keys bound through usage plans keep the REST API alive, so the
    association has to go before the stack can be removed.

    Args:
        stack_name: Stack that owns the REST API
        api_keys: Configured API keys; nothing is done when empty
        cfn_client: CloudFormation client
        apigw_client: API Gateway client
        rest_api_logical_id: Logical id of the REST API resource in the stack
        region: AWS region used when clients have to be created

    Returns:
        The patch requests issued, one per removed stage
    """
    if not api_keys:
        return []

    logger.info("Removing usage plan association")
    cfn_client = cfn_client or boto3.client('cloudformation', region_name=region)
    apigw_client = apigw_client or boto3.client('apigateway', region_name=region)

    resource = cfn_client.describe_stack_resource(
        StackName=stack_name,
        LogicalResourceId=rest_api_logical_id,
    )
    rest_api_id = resource['StackResourceDetail']['PhysicalResourceId']
    requests = []
    for plan in _usage_plans(apigw_client):
        api_stages = plan.get('apiStages', [])
        if rest_api_id not in [stage.get('apiId') for stage in api_stages]:
            continue
        for stage in api_stages:
            request = {
                'usagePlanId': plan['id'],
                'patchOperations': [
                    {
                        'op': 'remove',
                        'path': '/apiStages',
                        'value': f"{stage['apiId']}:{stage['stage']}",
                    }
                ],
            }
            apigw_client.update_usage_plan(**request)
            requests.append(request)
            logger.debug(f"Removed {stage['apiId']}:{stage['stage']} from usage plan {plan['id']}")

    return requests


def _usage_plans(apigw_client) -> Iterator[Dict[str, Any]]:
    paginator = apigw_client.get_paginator('get_usage_plans')
    for page in paginator.paginate():
        for plan in page.get('items', []):
            yield plan
