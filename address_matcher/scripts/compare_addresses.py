"""
Compare two addresses from the command line

Usage:
    address-matcher "10 Downing St, London" "10 Downing Street, Westminster"
    address-matcher --provider ollama --config-file config.yml "..." "..."
"""

import asyncio
import sys

import click
from loguru import logger

from address_matcher.api.model import ComparisonResult
from address_matcher.comparator import AddressComparator
from address_matcher.configuration import get_config_provider, setup_config_store


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with loguru"""
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        level="DEBUG" if verbose else "WARNING",
    )


async def run(address1: str, address2: str, config_file: str, provider: str | None, verbose: bool = False) -> ComparisonResult:
    # stdout is reserved for the verdict
    setup_logging(verbose)
    await setup_config_store(config_file, configure_logs=False)
    if provider:
        get_config_provider().get_config().update({"llm.provider": provider})
    comparator = AddressComparator()
    return await comparator.compare(address1, address2)


@click.command()
@click.argument("address1")
@click.argument("address2")
@click.option("--config-file", default="config.yml", show_default=True, help="Configuration file")
@click.option("--provider", default=None, help="LLM provider key (gemini, openai, ollama)")
@click.option("--verbose", "-v", is_flag=True, help="Verbose logging")
def main(address1: str, address2: str, config_file: str, provider: str | None, verbose: bool) -> None:
    """Tell if ADDRESS1 and ADDRESS2 refer to the same physical location.

    Prints the verdict as JSON. Exits with 0 on a match and 1 otherwise.
    """
    result: ComparisonResult = asyncio.run(run(address1, address2, config_file, provider, verbose))
    click.echo(result.model_dump_json(indent=2))
    sys.exit(0 if result.match else 1)


if __name__ == "__main__":
    main()  # pylint: disable=no-value-for-parameter
