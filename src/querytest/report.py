"""Console report of a scenario run.

The report lines have stable prefixes and wording and are read both by
people and by golden-output tests. Successful queries and the run
summary go to standard output; per-query warnings and failures go to
standard error.
"""

from collections.abc import Iterable

from click import echo

OK = '[OK  ]'
INFO = '[INFO]'
WARN = '[WARN]'
FAIL = '[FAIL]'


class ConsoleReporter:
    """Writes report lines with `click.echo`."""

    def query_rows(self, query_name: str, row_count: int) -> None:
        """Report a successful read statement."""
        echo(f"{OK} {query_name}'s row count is {row_count}.")

    def query_affected(self, query_name: str, affected_rows: int) -> None:
        """Report a successful write statement."""
        echo(f"{OK} {query_name}'s affected row is {affected_rows}.")

    def query_mismatch(self, query_name: str, detail: str) -> None:
        """Report a result that does not match its declared shape."""
        echo(f'{WARN} {query_name} is failed to execute. {detail}', err=True)

    def query_failure(self, query_name: str, detail: str) -> None:
        """Report a hard query failure."""
        echo(f'{FAIL} {query_name} is failed to execute. {detail}', err=True)

    def summary(self, passed: int, tested: int, catalog_size: int) -> None:
        """Report run statistics."""
        echo(f'{INFO} {passed} passed / {tested} tested in {catalog_size} querymap.')

    def unexecuted(self, query_names: Iterable[str]) -> None:
        """Report catalog queries no tester referenced."""
        echo(f'{WARN} {', '.join(query_names)} are not excuted.')

    def fatal(self, message: str) -> None:
        """Report an error that aborted the run."""
        echo(f'{FAIL} {message}', err=True)
