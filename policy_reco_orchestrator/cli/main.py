"""
Main CLI entry point for the Policy Recommendation Orchestrator

Provides the command-line interface for running policy recommendation jobs,
checking their status and retrieving their results.
"""

import json
import sys
from typing import Optional

import click

from ..core.exceptions import PolicyRecoError, ResultDeliveryError
from ..core.orchestrator import RecommendationOrchestrator
from ..models.job import JobStatusReport
from ..services.result_fetcher import deliver_result
from ..services.validator import validate_request, validate_endpoint
from ..utils.config import load_config
from ..utils.logger import setup_logger


@click.group()
@click.option('--kubeconfig', '-k', type=click.Path(), help='Path to the kubeconfig file')
@click.option('--config', '-c', 'config_file', type=click.Path(exists=True), help='Configuration file path')
@click.option('--log-level', '-l', default='WARNING', help='Log level')
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
@click.pass_context
def cli(ctx, kubeconfig, config_file, log_level, verbose):
    """Policy Recommendation Orchestrator CLI"""

    ctx.ensure_object(dict)

    logger = setup_logger(level=log_level, structured=not verbose)
    ctx.obj['logger'] = logger

    ctx.obj['kubeconfig'] = kubeconfig
    ctx.obj['config_file'] = config_file
    ctx.obj['verbose'] = verbose


@cli.group('policy-recommendation')
@click.pass_context
def policy_recommendation(ctx):
    """Commands of the policy recommendation feature"""
    pass


cli.add_command(policy_recommendation, name='pr')


@policy_recommendation.command('run')
@click.option('--type', '-t', 'reco_type', default='initial',
              help='{initial|subsequent} Indicates this recommendation is an initial recommendation '
                   'or a subsequent recommendation job.')
@click.option('--limit', '-l', type=int, default=0,
              help='The limit on the number of flow records read from the database. 0 means no limit.')
@click.option('--option', '-o', default='anp-deny-applied',
              help='Option of network isolation preference in policy recommendation: '
                   'anp-deny-applied, anp-deny-all or k8s-np.')
@click.option('--start-time', '-s', default='',
              help='The start time of the flow records considered for the policy recommendation. '
                   'Format is YYYY-MM-DD hh:mm:ss in UTC timezone.')
@click.option('--end-time', '-e', default='',
              help='The end time of the flow records considered for the policy recommendation. '
                   'Format is YYYY-MM-DD hh:mm:ss in UTC timezone.')
@click.option('--ns-allow-list', '-n', default='',
              help='JSON list of default traffic allow namespaces. Defaults to '
                   '["kube-system", "flow-aggregator", "flow-visibility"].')
@click.option('--rm-labels', type=bool, default=True,
              help="Remove automatically generated Pod labels such as 'pod-template-hash'.")
@click.option('--to-services', type=bool, default=True,
              help='Recommend toServices rules for Pod-to-Service flows, '
                   'only works with option anp-deny-applied or anp-deny-all.')
@click.option('--executor-instances', type=int, default=1,
              help='Number of executors for the Spark application.')
@click.option('--driver-core-request', default='200m',
              help='CPU request for the driver Pod, e.g. 0.1, 500m, 1.5, 5.')
@click.option('--driver-memory', default='512M',
              help='Memory request for the driver Pod, e.g. 512M, 1G, 8G.')
@click.option('--executor-core-request', default='200m',
              help='CPU request for the executor Pods, e.g. 0.1, 500m, 1.5, 5.')
@click.option('--executor-memory', default='512M',
              help='Memory request for the executor Pods, e.g. 512M, 1G, 8G.')
@click.option('--wait', is_flag=True,
              help='Wait for the job to finish and print or save its result.')
@click.option('--clickhouse-endpoint', default='',
              help='The ClickHouse HTTP endpoint. (Only works when wait is enabled)')
@click.option('--use-cluster-ip', is_flag=True,
              help='Use the ClickHouse Service ClusterIP instead of port forwarding. '
                   'Only usable in cluster. (Only works when wait is enabled)')
@click.option('--file', '-f', 'file_path', type=click.Path(dir_okay=False),
              help='File path to save the result to. (Only works when wait is enabled)')
@click.pass_context
def run_job(ctx, reco_type, limit, option, start_time, end_time, ns_allow_list, rm_labels,
            to_services, executor_instances, driver_core_request, driver_memory,
            executor_core_request, executor_memory, wait, clickhouse_endpoint,
            use_cluster_ip, file_path):
    """Run a new policy recommendation Spark job"""

    logger = ctx.obj['logger']

    try:
        request = validate_request({
            'type': reco_type,
            'limit': limit,
            'option': option,
            'start_time': start_time,
            'end_time': end_time,
            'ns_allow_list': ns_allow_list,
            'rm_labels': rm_labels,
            'to_services': to_services,
            'executor_instances': executor_instances,
            'driver_core_request': driver_core_request,
            'driver_memory': driver_memory,
            'executor_core_request': executor_core_request,
            'executor_memory': executor_memory,
        })

        endpoint = None
        if wait:
            endpoint = validate_endpoint(clickhouse_endpoint)
        elif clickhouse_endpoint or use_cluster_ip or file_path:
            logger.warning("--clickhouse-endpoint, --use-cluster-ip and --file only work when wait is enabled")

        with _create_orchestrator(ctx) as orchestrator:
            outcome = orchestrator.run(request, wait=wait, endpoint=endpoint, use_cluster_ip=use_cluster_ip)

        if wait:
            try:
                deliver_result(outcome.result or "", file_path)
            except ResultDeliveryError:
                click.echo(
                    f"Policy recommendation job {outcome.job_id} completed, its result can be "
                    f"retrieved again with: policy-recommendation retrieve --id {outcome.job_id}",
                    err=True,
                )
                raise
        else:
            click.echo(f"Successfully created policy recommendation job with ID {outcome.job_id}")

    except PolicyRecoError as e:
        _exit_with_error(ctx, e)
    except Exception as e:
        logger.error(f"Error running policy recommendation job: {str(e)}", exc_info=True)
        click.echo(f"Error running policy recommendation job: {str(e)}", err=True)
        sys.exit(1)


@policy_recommendation.command('status')
@click.option('--id', '-i', 'job_id', required=True, help='ID of the policy recommendation job')
@click.pass_context
def job_status(ctx, job_id):
    """Get the status of a policy recommendation job"""

    try:
        with _create_orchestrator(ctx) as orchestrator:
            report = orchestrator.get_status(job_id)

    except PolicyRecoError as e:
        _exit_with_error(ctx, e)
    except Exception as e:
        ctx.obj['logger'].error(f"Error getting job status: {str(e)}", exc_info=True)
        click.echo(f"Error getting job status: {str(e)}", err=True)
        sys.exit(1)

    _display_status(report, ctx.obj['verbose'])


@policy_recommendation.command('retrieve')
@click.option('--id', '-i', 'job_id', required=True, help='ID of the policy recommendation job')
@click.option('--file', '-f', 'file_path', type=click.Path(dir_okay=False),
              help='File path to save the result to')
@click.option('--clickhouse-endpoint', default='', help='The ClickHouse HTTP endpoint')
@click.option('--use-cluster-ip', is_flag=True,
              help='Use the ClickHouse Service ClusterIP instead of port forwarding. Only usable in cluster.')
@click.pass_context
def retrieve_result(ctx, job_id, file_path, clickhouse_endpoint, use_cluster_ip):
    """Retrieve the result of a completed policy recommendation job"""

    try:
        endpoint = validate_endpoint(clickhouse_endpoint)
        with _create_orchestrator(ctx) as orchestrator:
            result = orchestrator.retrieve_result(job_id, endpoint=endpoint, use_cluster_ip=use_cluster_ip)
        deliver_result(result, file_path)

    except PolicyRecoError as e:
        _exit_with_error(ctx, e)
    except Exception as e:
        ctx.obj['logger'].error(f"Error retrieving job result: {str(e)}", exc_info=True)
        click.echo(f"Error retrieving job result: {str(e)}", err=True)
        sys.exit(1)


# Helper Functions
def _create_orchestrator(ctx) -> RecommendationOrchestrator:
    """Create an orchestrator from the global CLI options"""
    config = load_config(ctx.obj['config_file'])
    return RecommendationOrchestrator.from_kubeconfig(ctx.obj['kubeconfig'], config=config)


def _exit_with_error(ctx, error: PolicyRecoError):
    """Report an orchestrator error and terminate with its exit code"""
    click.echo(f"Error: {error.message}", err=True)
    if ctx.obj['verbose']:
        click.echo(json.dumps(error.to_dict(), indent=2, default=str), err=True)
    sys.exit(error.exit_code)


def _display_status(report: JobStatusReport, verbose: bool):
    """Display the status of a job"""
    click.echo(f"Status of this policy recommendation job is {report.raw_state or 'NEW'}")

    if report.error_message:
        click.echo(f"Error message: {report.error_message}")

    if verbose and report.parameters:
        click.echo("Parameters:")
        click.echo(json.dumps(report.parameters, indent=2))


def main(args: Optional[list] = None):
    """Main CLI entry point"""
    cli(args=args)


if __name__ == '__main__':
    main()
