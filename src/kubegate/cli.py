# src/kubegate/cli.py
"""Command-line surface over the resource gateway."""

import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

import click
import structlog

from kubegate.clients.kubernetes.registry import ClusterRegistry
from kubegate.config.settings import Settings
from kubegate.core.exceptions import KubeGateException
from kubegate.core.utils import setup_logging
from kubegate.gateway import ResourceGateway
from kubegate.models.responses import GatewayResponse, entry_type

logger = structlog.get_logger(__name__)


def _run(ctx: click.Context, cluster_id: str, action: str, kind: str,
         operation: Callable[[ResourceGateway], Awaitable[Any]],
         message: Callable[[Any], str] = lambda _: "") -> None:
    """Build the registry, run one gateway operation and print the response envelope."""
    settings: Settings = ctx.obj["settings"]
    label = entry_type(action, kind)
    if cluster_id in settings.kubernetes.datacenters:
        # Only the target datacenter needs a connection for a one-shot command.
        settings = settings.model_copy(deep=True)
        settings.kubernetes.datacenters = [cluster_id]

    async def execute() -> GatewayResponse:
        registry = await ClusterRegistry.from_settings(settings)
        try:
            gateway = ResourceGateway(registry, settings.gateway)
            try:
                result = await operation(gateway)
            except KubeGateException as e:
                return GatewayResponse.failure(label, e)
            return GatewayResponse.success(label, result, message(result))
        finally:
            await registry.close()

    response = asyncio.run(execute())
    click.echo(json.dumps(response.model_dump(), indent=2, default=str))
    if not response.ok:
        sys.exit(1)


@click.group()
@click.option('--config-path', default=None, help='Directory holding <datacenter><suffix> kubeconfig files')
@click.option('--timeout', type=float, default=None, help='Per-call timeout in seconds')
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, config_path, timeout, debug):
    """
    Generic list/get/create of Kubernetes resource kinds across datacenters.

    Configure your .env file with:
        K8S_CONFIG_PATH=./conf
        K8S_CONFIG_SUFFIX=.kubeconfig
        K8S_DATACENTERS=["prod-a", "prod-b"]

    Example:
        kubegate list deployment -d prod-a -n team-x -l app=web
    """
    settings = Settings.create_from_env()
    if debug:
        settings.debug = True
        settings.log_level = "DEBUG"
    if config_path:
        settings.kubernetes.config_path = config_path
    if timeout:
        settings.gateway.request_timeout_seconds = timeout

    setup_logging(log_level=str(getattr(settings.log_level, "value", settings.log_level)),
                  log_format=settings.log_format)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


@cli.command()
@click.pass_context
def clusters(ctx):
    """Show which configured datacenters could be loaded."""
    settings: Settings = ctx.obj["settings"]

    async def execute() -> GatewayResponse:
        registry = await ClusterRegistry.from_settings(settings)
        try:
            data = [
                {"datacenter": cluster_id, "server_version": k8s.server_version}
                for cluster_id, k8s in registry.items()
            ]
            missing = [dc for dc in settings.kubernetes.datacenters if dc not in registry]
            message = f"skipped: {', '.join(missing)}" if missing else ""
            return GatewayResponse.success("LIST_DATACENTER", data, message)
        finally:
            await registry.close()

    response = asyncio.run(execute())
    click.echo(json.dumps(response.model_dump(), indent=2, default=str))


@cli.command(name="list")
@click.argument('kind')
@click.option('--datacenter', '-d', 'cluster_id', required=True, help='Target datacenter')
@click.option('--namespace', '-n', default=None, help='Namespace (default: GATEWAY_DEFAULT_NAMESPACE)')
@click.option('--all-namespaces', '-A', is_flag=True, help='List across all namespaces')
@click.option('--label', '-l', default='', help='Label selector, passed through verbatim')
@click.option('--limit', type=int, default=None, help='Page size (default: GATEWAY_DEFAULT_LIST_LIMIT)')
@click.option('--continue', 'continue_token', default=None, help='Continuation token from a previous page')
@click.pass_context
def list_command(ctx, kind, cluster_id, namespace, all_namespaces, label, limit, continue_token):
    """List objects of KIND."""
    if all_namespaces:
        namespace = ""
    _run(ctx, cluster_id, "list", kind, lambda gateway: gateway.list_resources(
        cluster_id, kind, namespace, label_selector=label, limit=limit, continue_token=continue_token
    ))


@cli.command()
@click.argument('kind')
@click.argument('name')
@click.option('--datacenter', '-d', 'cluster_id', required=True, help='Target datacenter')
@click.option('--namespace', '-n', default=None, help='Namespace (default: GATEWAY_DEFAULT_NAMESPACE)')
@click.pass_context
def get(ctx, kind, name, cluster_id, namespace):
    """Get the object NAME of KIND."""
    _run(ctx, cluster_id, "get", kind, lambda gateway: gateway.get_resource(cluster_id, kind, namespace, name))


@cli.command()
@click.option('--filename', '-f', type=click.Path(exists=True, dir_okay=False, path_type=Path), required=True,
              help='YAML or JSON manifest declaring apiVersion and kind')
@click.option('--datacenter', '-d', 'cluster_id', required=True, help='Target datacenter')
@click.option('--namespace', '-n', default=None, help='Namespace when the manifest declares none')
@click.option('--kind', default=None, help='Expected kind; the manifest is authoritative')
@click.pass_context
def create(ctx, filename, cluster_id, namespace, kind):
    """Create the object described by a manifest file."""
    raw = filename.read_bytes()
    _run(ctx, cluster_id, "create", kind or "resource", lambda gateway: gateway.create_resource(
        cluster_id, kind, namespace, raw
    ), message=lambda name: f"{name} create success")


if __name__ == '__main__':
    cli()
