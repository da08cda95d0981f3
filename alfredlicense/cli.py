import argparse
import os
import sys
import textwrap
from datetime import datetime
from pathlib import Path

from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)

from alfredlicense.alfred import ErrorItem, FilterLicenses, MakeItems, ScriptFilterJson
from alfredlicense.cache import ExpiringKeyedCache
from alfredlicense.config import BuildLicenseCaches, LoadWorkflowConfig
from alfredlicense.console import SetVerbose, VerbosePrint, console
from alfredlicense.errors import (
    FetchError,
    LicenseNotFoundError,
    MissingInputError,
    PlaceholderRulesError,
)
from alfredlicense.placeholders import LoadPlaceholderRules, PersonalizeLicenseBody
from alfredlicense.text_view import ErrorMarkdown, GenerateMarkdown


def RequireKey(key: str | None) -> str:
    """
    Normalizes a license key passed by Alfred.
    Raises
    ------
    MissingInputError
        If the key is empty.
    """

    key = (key or "").strip().lower()

    if not key:

        raise MissingInputError("No license key provided")

    return key


def ListLicensesJson(listCache: ExpiringKeyedCache, query: str, refresh: bool = False) -> str:
    """
    Builds the script filter response for a search query.
    Parameters
    ----------
    listCache : ExpiringKeyedCache
        The catalogue cache.
    query : str
        What the user typed; empty lists everything.
    refresh : bool, optional
        Bypass the fresh cache, by default False.
    Returns
    -------
    str
        Alfred JSON. Failures become a single non-actionable item.
    """

    try:
        licenses = listCache.GetAll(forceRefresh=refresh)

    except FetchError as e:
        VerbosePrint(f"List fetch failed: {e}")

        return ScriptFilterJson(
            [
                ErrorItem(
                    "Error fetching licenses",
                    "Could not connect to GitHub API. Please try again.",
                )
            ]
        )

    items = MakeItems(FilterLicenses(licenses, query))

    if not items:

        return ScriptFilterJson(
            [ErrorItem("No licenses found", f'No results for "{query.strip()}"')]
        )

    return ScriptFilterJson(items)


def GetPersonalizedLicense(
    licenseCache: ExpiringKeyedCache,
    key: str,
    fullname: str | None,
    year: str,
    email: str | None = None,
    refresh: bool = False,
) -> tuple[dict, str]:
    """
    Loads a license through the cache and fills its placeholders.
    Returns
    -------
    tuple[dict, str]
        The cached record and the personalized body.
    """

    licenseEntry = licenseCache.Get(key, forceRefresh=refresh)
    body = PersonalizeLicenseBody(
        licenseEntry.get("body") or "",
        key,
        LoadPlaceholderRules(),
        fullname=fullname,
        year=year,
        email=email,
    )

    return licenseEntry, body


def SyncLicenses(
    listCache: ExpiringKeyedCache, licenseCache: ExpiringKeyedCache, refresh: bool = False
) -> int:
    """
    Fetches every license in the catalogue into the per-license cache so the
    Text View and copy actions work offline.
    Returns
    -------
    int
        Number of licenses that could not be cached.
    """

    licenses = listCache.GetAll(forceRefresh=refresh)
    failed = []
    progressColumns = [
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(bar_width=None),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
    ]

    with Progress(*progressColumns, console=console, transient=False) as progress:
        task = progress.add_task("[cyan]Syncing licenses...", total=len(licenses))

        for lic in licenses:
            key = lic["key"]
            progress.update(task, description=f"[cyan]Fetching: {key}")

            try:
                licenseCache.Get(key, forceRefresh=refresh)

            except FetchError as e:
                failed.append(key)
                console.print(f"[bold red]Error:[/bold red] {key}: {e}")
            progress.advance(task)

    if failed:
        console.print(f"[yellow]Warn:[/yellow] Not cached: {', '.join(failed)}")

    else:
        console.print(f"Cached {len(licenses)} licenses.")

    return len(failed)


def BuildArgumentParser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="alfred-license",
        description="Search, preview and copy licenses from the GitHub license API for Alfred.",
        formatter_class=argparse.RawTextHelpFormatter,
        epilog=textwrap.dedent(
            """\
    Examples:
      %(prog)s --list apache
      %(prog)s --view mit
      %(prog)s --copy mit -f "Jane Doe" -y 2024
      %(prog)s --sync"""
        ),
    )
    parser.add_argument("--refresh", action="store_true", help="Ignore fresh cache.")
    parser.add_argument(
        "--cache-dir",
        type=Path,
        help="Cache directory (def: $alfred_workflow_cache).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output.")

    actionGroup = parser.add_mutually_exclusive_group(required=True)
    actionGroup.add_argument(
        "--list",
        nargs="?",
        const="",
        metavar="QUERY",
        help="Script filter JSON for a query (all if empty).",
    )
    actionGroup.add_argument("--view", metavar="KEY", help="Markdown for Text View.")
    actionGroup.add_argument("--copy", metavar="KEY", help="Personalized license text.")
    actionGroup.add_argument(
        "--sync", action="store_true", help="Cache every license for offline use."
    )

    fillGroup = parser.add_argument_group("Options for --view/--copy")
    fillGroup.add_argument("-f", "--fullname", help="Copyright holder (def: $license_fullname).")
    fillGroup.add_argument("-y", "--year", help="Year (def: current).")
    fillGroup.add_argument("-e", "--email", help="Email, where the license asks for one.")

    return parser


def main(argv: list[str] | None = None) -> int:
    parsedArgs = BuildArgumentParser().parse_args(argv)
    config = LoadWorkflowConfig(
        os.environ,
        cacheDir=parsedArgs.cache_dir,
        fullname=parsedArgs.fullname,
        verbose=parsedArgs.verbose,
    )
    SetVerbose(config.verbose)
    VerbosePrint(f"Cache dir: {config.cacheDir}")

    listCache, licenseCache = BuildLicenseCaches(config)
    year = parsedArgs.year or str(datetime.now().year)

    if parsedArgs.list is not None:
        sys.stdout.write(ListLicensesJson(listCache, parsedArgs.list, parsedArgs.refresh))

        return 0

    if parsedArgs.sync:

        try:

            return 1 if SyncLicenses(listCache, licenseCache, parsedArgs.refresh) else 0

        except FetchError as e:
            console.print(f"[bold red]Error:[/bold red] Could not fetch license list: {e}")

            return 1

    if parsedArgs.view is not None:

        try:
            key = RequireKey(parsedArgs.view)
            licenseEntry, body = GetPersonalizedLicense(
                licenseCache, key, config.fullname, year, parsedArgs.email, parsedArgs.refresh
            )
            sys.stdout.write(GenerateMarkdown(licenseEntry, body))

        except MissingInputError as e:
            sys.stdout.write(ErrorMarkdown(f"{e}."))

            return 1

        except LicenseNotFoundError:
            sys.stdout.write(ErrorMarkdown(f'License "{parsedArgs.view}" not found.'))

        except FetchError as e:
            sys.stdout.write(
                ErrorMarkdown(f'Could not fetch license "{parsedArgs.view}": {e}')
            )

        except PlaceholderRulesError as e:
            console.print(f"[bold red]Error:[/bold red] {e}")
            sys.stdout.write(ErrorMarkdown(f"Placeholder rules are broken: {e}"))

            return 1

        return 0

    try:
        key = RequireKey(parsedArgs.copy)
        _, body = GetPersonalizedLicense(
            licenseCache, key, config.fullname, year, parsedArgs.email, parsedArgs.refresh
        )

    except LicenseNotFoundError as e:
        console.print(f"\n[bold red]Error:[/bold red] {e}.")

        return 1

    except FetchError as e:
        console.print(
            f"\n[bold red]Error:[/bold red] Could not fetch license '{parsedArgs.copy}': {e}"
        )

        return 1

    except (MissingInputError, PlaceholderRulesError) as e:
        console.print(f"\n[bold red]Error:[/bold red] {e}")

        return 1

    sys.stdout.write(body)

    return 0


if __name__ == "__main__":

    sys.exit(main())
