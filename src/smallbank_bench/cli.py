#!/usr/bin/env python3
import json
import logging
import sys
from typing import Any, Callable, List, Optional, Tuple

import click
from click_option_group import MutuallyExclusiveOptionGroup, optgroup

from .client import WorkloadSettings
from .constants import (
    DEFAULT_CHECKING_BALANCE,
    DEFAULT_SAVINGS_BALANCE,
    DEFAULT_TOTAL_ACCOUNTS,
    FINAL_CHECKPOINT,
    INITIAL_CHECKPOINT,
    TransactionType,
)
from .errors import SmallBankBenchError
from .fixture import check_fixture_params, load_verification_file
from .parallel_runner import ParallelRunner
from .runner import Runner
from .selector import FixedTypeSelector, TypeSelector, WeightedTypeSelector, parse_type_name

logger = logging.getLogger(__name__)


def setup_logging(log_level_str: str) -> None:
    """Convert a log level name to a numeric level and configure logging."""
    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }

    if log_level_str not in level_map:
        raise click.BadParameter(
            f"Invalid log level: {log_level_str}. Valid options: {list(level_map.keys())}"
        )

    logging.basicConfig(
        level=level_map[log_level_str],
        format="%(asctime)s - PID:%(process)d - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def parse_weighted_mix_spec(_ctx: Any, _param: Any, values: Tuple[str, ...]) -> List[Tuple[TransactionType, float]]:
    """
    Parse transaction mix specifications in format 'NAME@weight' or 'NAME'.

    This is a Click callback that validates and parses the mix specification.

    Args:
        _ctx: Click context (unused)
        _param: Click parameter (unused)
        values: Mix specification strings

    Returns:
        List of tuples of (transaction type, weight)

    Raises:
        click.BadParameter: If weight syntax is invalid or the type name is unknown
    """
    result = []
    for value in values:
        if "@" in value:
            name, weight_str = value.rsplit("@", 1)
            try:
                weight = float(weight_str)
            except ValueError:
                raise click.BadParameter(f"Invalid weight syntax in: {value}. Expected format: NAME@weight")
            if weight <= 0:
                raise click.BadParameter(f"Weight must be positive in: {value}")
        else:
            name = value
            weight = 1.0

        try:
            result.append((parse_type_name(name), weight))
        except ValueError as e:
            raise click.BadParameter(str(e))
    return result


def parse_sequence_spec(_ctx: Any, _param: Any, values: Tuple[str, ...]) -> List[TransactionType]:
    """Click callback turning repeated --sequence names into transaction types."""
    try:
        return [parse_type_name(value) for value in values]
    except ValueError as e:
        raise click.BadParameter(str(e))


def create_type_selector(
    mix: List[Tuple[TransactionType, float]], sequence: List[TransactionType]
) -> Optional[TypeSelector]:
    """
    Create the transaction type selector from --mix or --sequence.

    Returns:
        Selector instance, or None to use the uniform default
    """
    if mix:
        selector = WeightedTypeSelector(mix)
        for txn_type, weight in selector.weights.items():
            click.echo(f"Transaction mix: {txn_type.name} (weight: {weight})")
        click.echo(f"Total weight: {selector.total_weight}")
        return selector
    if sequence:
        click.echo(f"Fixed transaction sequence: {', '.join(t.name for t in sequence)}")
        return FixedTypeSelector(sequence)
    return None


def account_options(func: Callable) -> Callable:
    """Options selecting the account range of a client instance."""
    func = click.option(
        "--client-id",
        type=click.IntRange(min=0),
        default=0,
        help="Index of this client instance (default: 0)",
    )(func)
    func = click.option(
        "--pc",
        "partition_clients",
        is_flag=True,
        help="Partition accounts so that each client instance owns a disjoint range",
    )(func)
    func = click.option(
        "--accounts",
        type=click.IntRange(min=1),
        default=DEFAULT_TOTAL_ACCOUNTS,
        help=f"Number of accounts per client instance (default: {DEFAULT_TOTAL_ACCOUNTS})",
    )(func)
    return func


def balance_options(func: Callable) -> Callable:
    """Options setting the starting balances of created accounts."""
    func = click.option(
        "--savings-balance",
        type=int,
        default=DEFAULT_SAVINGS_BALANCE,
        help=f"Initial savings balance of every account (default: {DEFAULT_SAVINGS_BALANCE})",
    )(func)
    func = click.option(
        "--checking-balance",
        type=int,
        default=DEFAULT_CHECKING_BALANCE,
        help=f"Initial checking balance of every account (default: {DEFAULT_CHECKING_BALANCE})",
    )(func)
    return func


@click.group()
@click.option(
    "--host",
    "-H",
    envvar="SMALLBANK_HOST",
    required=True,
    help="Base URL of the service to connect to (e.g., https://127.0.0.1:8000)",
)
@click.option(
    "--path-prefix",
    envvar="SMALLBANK_PATH_PREFIX",
    default="/app",
    help="Path prepended to every method name (default: /app)",
)
@click.option("--ca-file", envvar="SMALLBANK_CA_FILE", help="Path to root certificate file")
@click.option("--cert", envvar="SMALLBANK_CERT", help="Path to client certificate file")
@click.option("--key", envvar="SMALLBANK_KEY", help="Path to client private key file")
@click.option(
    "--timeout",
    type=float,
    default=10.0,
    help="Request timeout in seconds (default: 10)",
)
@click.option(
    "--log-level",
    type=str,
    default="INFO",
    help="Logging level. Options: DEBUG, INFO, WARNING, ERROR, CRITICAL. Default: INFO",
)
@click.pass_context
def cli(
    ctx: click.Context,
    host: str,
    path_prefix: str,
    ca_file: Optional[str],
    cert: Optional[str],
    key: Optional[str],
    timeout: float,
    log_level: str,
) -> None:
    """SmallBank workload driver."""
    setup_logging(log_level)

    runner = Runner(
        host=host,
        path_prefix=path_prefix,
        ca_file=ca_file,
        cert_file=cert,
        key_file=key,
        timeout=timeout,
    )

    ctx.ensure_object(dict)
    ctx.obj["runner"] = runner


@cli.command()
@account_options
@balance_options
@click.pass_context
def init(
    ctx: click.Context,
    accounts: int,
    partition_clients: bool,
    client_id: int,
    checking_balance: int,
    savings_balance: int,
) -> None:
    """Create the accounts of a client instance."""
    runner = ctx.obj["runner"]
    settings = WorkloadSettings(
        total_accounts=accounts,
        partition_clients=partition_clients,
        initial_checking_balance=checking_balance,
        initial_savings_balance=savings_balance,
    )

    click.echo(f"Initializing {accounts} accounts on {runner.host} for client {client_id}")
    try:
        classification = runner.init_accounts(settings, client_id)
    except SmallBankBenchError as e:
        raise click.ClickException(str(e)) from e

    if classification.message:
        click.echo(f"Service reported: {classification.message}")
    click.echo("Initialization completed")


@cli.command()
@account_options
@balance_options
@click.option(
    "--processes",
    "-p",
    type=click.IntRange(min=1),
    default=1,
    help="Number of parallel client processes, numbered from --client-id (default: 1)",
)
@click.option(
    "--transactions",
    "-t",
    type=click.IntRange(min=0),
    default=1000,
    help="Number of transactions each client instance runs (default: 1000)",
)
@click.option("--seed", type=int, help="Seed of the random generator; client i uses seed + i")
@click.option(
    "--verify",
    "verification_file",
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file with expected Initial and Final account balances",
)
@click.option(
    "--no-create",
    is_flag=True,
    help="Skip account creation and transact against existing accounts",
)
@optgroup.group(
    "Transaction mix",
    cls=MutuallyExclusiveOptionGroup,
    help="Specify ONLY one of: a weighted random mix OR a fixed sequence. Default: uniform over all types.",
)
@optgroup.option(
    "--mix",
    "-m",
    multiple=True,
    callback=parse_weighted_mix_spec,
    help="Transaction type with optional weight: NAME@weight (default weight: 1). Can be specified multiple times.",
)
@optgroup.option(
    "--sequence",
    multiple=True,
    callback=parse_sequence_spec,
    help="Transaction type of a fixed cyclic sequence. Can be specified multiple times.",
)
@click.pass_context
def run(
    ctx: click.Context,
    accounts: int,
    partition_clients: bool,
    client_id: int,
    checking_balance: int,
    savings_balance: int,
    processes: int,
    transactions: int,
    seed: Optional[int],
    verification_file: Optional[str],
    no_create: bool,
    mix: List[Tuple[TransactionType, float]],
    sequence: List[TransactionType],
) -> None:
    """Run the workload against the service."""
    runner = ctx.obj["runner"]

    try:
        fixture = None
        if verification_file:
            fixture = load_verification_file(verification_file)
            check_fixture_params(fixture, accounts, partition_clients)

        settings = WorkloadSettings(
            total_accounts=accounts,
            partition_clients=partition_clients,
            transactions=transactions,
            initial_checking_balance=checking_balance,
            initial_savings_balance=savings_balance,
            create_accounts=not no_create,
            seed=seed,
            selector=create_type_selector(mix, sequence),
            fixture=fixture,
        )

        mode = "partitioned" if partition_clients else "shared"
        click.echo(
            f"Running workload on {runner.host} with accounts={accounts}, mode={mode}, "
            f"clients={processes}, transactions={transactions} per client"
        )

        if processes == 1:
            metrics = runner.run(settings, client_id)
        else:
            parallel_runner = ParallelRunner(runner)
            metrics = parallel_runner.run_parallel(settings, processes, client_id)
    except (SmallBankBenchError, ValueError) as e:
        raise click.ClickException(str(e)) from e

    metrics.print_summary()

    click.echo("Workload completed")


@cli.command()
@account_options
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, writable=True),
    help="Write balances as a verification file instead of logging them",
)
@click.option(
    "--label",
    type=click.Choice([INITIAL_CHECKPOINT, FINAL_CHECKPOINT]),
    default=FINAL_CHECKPOINT,
    help=f"Checkpoint the balances are written under (default: {FINAL_CHECKPOINT})",
)
@click.pass_context
def balances(
    ctx: click.Context,
    accounts: int,
    partition_clients: bool,
    client_id: int,
    output: Optional[str],
    label: str,
) -> None:
    """Read the balance of every account of a client instance."""
    runner = ctx.obj["runner"]
    settings = WorkloadSettings(total_accounts=accounts, partition_clients=partition_clients)

    try:
        entries = runner.dump_balances(settings, client_id)
    except SmallBankBenchError as e:
        raise click.ClickException(str(e)) from e

    if output:
        with open(output, "w") as f:
            json.dump({"accounts": accounts, label: entries}, f, indent=4)
        click.echo(f"Wrote {len(entries)} balances to {output}")
    else:
        logger.info(f"Accounts:\n{json.dumps(entries, indent=4)}")


if __name__ == "__main__":
    cli()
