import os
import re
import sys

import click
from pydantic import ValidationError

from kube_headroom.engine.accounting import compute_headroom
from kube_headroom.models.app import AppContext
from kube_headroom.models.custom_errors import ClusterConnectionError, ListingError
from kube_headroom.reporting.reporter import build_report, compile_node_patterns, render_text
from kube_headroom.utils.cluster_manager import ClusterManager, ConnectionConfig
from kube_headroom.utils.fs import dump_data, save_text_to_file
from kube_headroom.utils.logger import (
    get_module_logger,
    set_global_log_level,
    verbosity_to_level,
)

logger = get_module_logger(__name__)


@click.group(context_settings={"show_default": True})
def main():
    pass


@main.command(
    help='Report remaining CPU, memory and pod headroom per node'
)
@click.option('--kubeconfig', '-k', help='Path to cluster kubeconfig file. In-cluster credentials are used when empty.',
              default=os.getenv('KUBECONFIG', None))
@click.option('--context', help='Kubeconfig context to use.', default=None)
@click.option('--in-cluster', is_flag=True, help='Use the pod service account even if a kubeconfig is set.')
@click.option('--node', '-n', help='Node name(s) to report. Supports Regex and comma separated values.', default='.*')
@click.option('--format', '-f', help='Format of the report.',
    type=click.Choice(['text', 'json', 'yaml'], case_sensitive=False),
    default='text'
)
@click.option('--output', '-o', help='File to save the report to instead of printing it.', default=None)
@click.option('-v', '--verbose', count=True, help='Increase verbosity of output.')
@click.pass_context
def report(
    ctx,
    kubeconfig: str,
    context: str = None,
    in_cluster: bool = False,
    node: str = '.*',
    format: str = 'text',
    output: str = None,
    verbose: int = 0
):
    log_level = verbosity_to_level(verbose)
    ctx.obj = AppContext(verbose=log_level)
    set_global_log_level(log_level)

    try:
        compile_node_patterns(node)
    except re.error as err:
        logger.error("Invalid --node pattern %r: %s", node, err)
        sys.exit(1)

    connection = ConnectionConfig(
        kubeconfig=kubeconfig or None,
        context=context,
        in_cluster=in_cluster,
    )

    try:
        cluster_manager = ClusterManager(connection)
    except ClusterConnectionError as err:
        logger.error("Unable to connect to cluster: %s", err)
        sys.exit(1)

    try:
        components = cluster_manager.discover_components()
    except ListingError as err:
        logger.error("Unable to load cluster topology: %s", err)
        sys.exit(1)
    except ValidationError as err:
        logger.error("Cluster returned an unparseable resource quantity: %s", err)
        sys.exit(1)
    finally:
        cluster_manager.close()

    headroom = compute_headroom(components)

    if format.lower() == 'text':
        content = render_text(headroom, node)
    else:
        content = dump_data(build_report(headroom, node), format)

    if output:
        save_text_to_file(content, output)
        logger.info("Saved headroom report to %s", output)
    else:
        click.echo(content)
