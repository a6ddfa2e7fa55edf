"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Provides lazy record store initialization and
centralized result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from uniqctl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from uniqctl.config.settings import UniqSettings
    from uniqctl.infrastructure.store import SqlRecordStore
    from uniqctl.services.result import ServiceResult
    from uniqctl.services.uniqueness import UniquenessService


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The store is created on first use so ``--help`` and ``--version``
    never touch the database.
    """

    def __init__(self, settings: UniqSettings) -> None:
        self.settings = settings
        self._store: SqlRecordStore | None = None

        from uniqctl.config.logging import configure_logging

        configure_logging(
            verbose=settings.verbose,
            log_json=settings.log_json,
            sql_echo=settings.database.echo,
        )

    @property
    def store(self) -> SqlRecordStore:
        """Record store reflected from the configured database (lazy)."""
        if self._store is None:
            from uniqctl.infrastructure.database.engine import create_db_engine
            from uniqctl.infrastructure.store import SqlRecordStore

            # Statement echo goes through configure_logging, not the engine.
            engine = create_db_engine(self.settings.resolved_database_url)
            self._store = SqlRecordStore.reflect(engine)
            click.get_current_context().find_root().call_on_close(self.close)
        return self._store

    def service(self) -> UniquenessService:
        """UniquenessService over the configured store and rules."""
        from uniqctl.services.uniqueness import UniquenessService

        return UniquenessService(self.store, self.settings.rules)

    def close(self) -> None:
        if self._store is not None:
            self._store.close()
            self._store.engine.dispose()
            self._store = None

    def emit(self, result: ServiceResult, *, exit_code: int = 0) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout; exits with *exit_code*
          when it is non-zero (e.g. a record that is not unique).
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
            if exit_code:
                raise SystemExit(exit_code)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
