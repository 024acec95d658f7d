"""Command line entrypoint for stackmon."""

import json
import logging
import sys
from typing import Any, Dict

import click

from .cleanup import DEFAULT_REST_API_LOGICAL_ID, disassociate_usage_plan
from .config import FailurePolicy, MonitorConfig
from .errors import DeploymentFailedError
from .feed import error_message
from .session import monitor


@click.group()
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.pass_context
def main(ctx, debug):
    """Stackmon - follow CloudFormation stack operations."""
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _json_output(data: Dict[str, Any]) -> None:
    """Output data as JSON."""
    click.echo(json.dumps(data, indent=None))


@main.command()
@click.argument('stack')
@click.option('--operation', type=click.Choice(['create', 'update', 'delete']), required=True,
              help='Operation running on the stack')
@click.option('--interval-ms', type=int, default=None, help='Delay between polls in milliseconds')
@click.option('--verbose', is_flag=True, help='Print every stack event')
@click.option('--policy', type=click.Choice([p.value for p in FailurePolicy]), default=None,
              help='When a resource failure ends monitoring')
@click.option('--since', type=click.DateTime(), default=None,
              help='UTC time the operation was requested; older events are ignored')
@click.option('--region', default=None, help='AWS region')
@click.option('--json', 'output_json', is_flag=True, help='Output machine-readable JSON')
def watch(stack, operation, interval_ms, verbose, policy, region, since, output_json):
    """Monitor STACK until the running operation finishes."""
    try:
        config = MonitorConfig.from_env(verbose=True if verbose else None)
        overrides: Dict[str, Any] = {}
        if interval_ms is not None:
            overrides['poll_interval_ms'] = interval_ms
        if policy is not None:
            overrides['failure_policy'] = FailurePolicy(policy)
        if overrides:
            config = MonitorConfig(**{**config.model_dump(), **overrides})
    except ValueError as e:
        raise click.BadParameter(str(e))

    echo = (lambda line: click.echo(line, err=True)) if output_json else click.echo

    try:
        status = monitor(operation, stack, config=config, echo=echo, region=region, since=since)
    except DeploymentFailedError as e:
        if output_json:
            _json_output({'status': 'failed', 'resource': e.resource, 'reason': e.reason, 'error': str(e)})
        else:
            click.echo(f"❌ {e}", err=True)
        sys.exit(1)
    except Exception as e:
        error_msg = error_message(e)
        if output_json:
            _json_output({'error': error_msg})
        else:
            click.echo(f"❌ Monitoring failed: {error_msg}", err=True)
        sys.exit(2)

    if output_json:
        _json_output({'stack': stack, 'operation': operation, 'status': status})
    else:
        click.echo(f"✅ Stack {operation} finished: {status}")


@main.command('disassociate-usage-plan')
@click.argument('stack')
@click.option('--api-key', 'api_keys', multiple=True, help='Configured API key (repeatable)')
@click.option('--rest-api-logical-id', default=DEFAULT_REST_API_LOGICAL_ID, help='Logical id of the REST API')
@click.option('--region', default=None, help='AWS region')
def disassociate_usage_plan_cmd(stack, api_keys, rest_api_logical_id, region):
    """Remove STACK's REST API stages from usage plans."""
    try:
        requests = disassociate_usage_plan(
            stack,
            list(api_keys),
            rest_api_logical_id=rest_api_logical_id,
            region=region,
        )
    except Exception as e:
        click.echo(f"❌ {error_message(e)}", err=True)
        sys.exit(2)
    click.echo(f"Removed {len(requests)} usage plan stage(s)")


if __name__ == "__main__":
    main()
