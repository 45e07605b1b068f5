import logging
from typing import Optional, Tuple

import click
import torch

from ._pivoting import PIVOTING_STRATEGIES
from ._select import KthSelector
from ._tables import print_tables


@click.group()
def cli() -> None:
    pass


@cli.command()
@click.option(
    "--output",
    type=click.Path(dir_okay=False, writable=True),
    default=None,
    help="Write the generated tables to this file instead of stdout.",
)
@click.option("--verbose", is_flag=True, help="Log table generation progress.")
def tables(output: Optional[str], verbose: bool) -> None:
    """Generate and print the exp/log/sin/cos/tan tables."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG)
    if output:
        with open(output, "w") as fh:
            print_tables(file=fh)
    else:
        print_tables()


@cli.command("select")
@click.argument("values", nargs=-1, type=float, required=True)
@click.option("--k", "k", type=int, required=True, help="Zero-based rank to select.")
@click.option(
    "--pivoting",
    type=click.Choice(sorted(PIVOTING_STRATEGIES)),
    default="median_of_3",
    show_default=True,
    help="Pivot selection strategy.",
)
def select_cmd(values: Tuple[float, ...], k: int, pivoting: str) -> None:
    """Print the k-th smallest of VALUES."""
    if not 0 <= k < len(values):
        raise click.BadParameter(f"must be in [0, {len(values)})", param_hint="--k")
    work = torch.tensor(values, dtype=torch.float64)
    click.echo(repr(KthSelector(pivoting).select(work, None, k)))


if __name__ == "__main__":
    cli()
