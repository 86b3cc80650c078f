"""Standardized CLI option definitions shared across commands."""

import typer

NO_CACHE_OPTION = typer.Option(
    False, "--no-cache", help="Ignore and do not write any cache"
)

FORCE_REFRESH_OPTION = typer.Option(
    False,
    "--force-refresh",
    "-f",
    help="Refetch and rescore even when caches are valid",
)

DETAILS_OPTION = typer.Option(
    False, "--details", "-d", help="Show the scoring breakdown of each issue"
)

STATS_OPTION = typer.Option(False, "--stats", "-s", help="Show scoring statistics")

LIMIT_OPTION = typer.Option(
    None, "--limit", "-n", min=1, help="Maximum number of issues to display"
)

DRY_RUN_OPTION = typer.Option(
    False, "--dry-run", help="Show the new order without updating Linear"
)

VERBOSE_OPTION = typer.Option(
    False, "--verbose", "-v", help="Show debug logging"
)
