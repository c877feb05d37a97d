"""Spreadsheet import orchestration for chequebook.

A batch runs top to bottom over one uploaded workbook:

    idle -> locating-header -> parsing-rows -> ingesting -> summarizing -> done

with ``failed`` reachable from the first three states. Rows are ingested one
at a time in sheet order; a failing row is counted and the batch moves on.
The batch is not transactional: whatever was stored before a failure stays.
"""
import logging
from datetime import date
from typing import Callable, Optional

from chequebook import config
from chequebook.data_structures import ImportReport, ImportState, RowStatus
from chequebook.exceptions import PasswordProtectedFileError, ImportFileError
from chequebook.normalizers import format_currency
from chequebook.session import require_admin
from chequebook.services.header_locator import find_header_row, build_rows
from chequebook.services.row_ingestor import RowIngestor, ClientSnapshot
from chequebook.services.sheet_reader import read_workbook_grid

logger = logging.getLogger(__name__)

FAILURE_PASSWORD = "password-protected"
FAILURE_UNREADABLE = "unreadable"
FAILURE_NO_HEADER = "header-not-found"
FAILURE_NO_ROWS = "no-rows"


class ImportService:
    """Drives one spreadsheet import batch.

    Attributes:
        db: RecordStore for clients and loans.
        session: Current Session; imports require an admin.
        today: Fallback date for unparseable due dates (default: current date).
    """

    def __init__(self, db_manager, session=None, today: date = None):
        self.db = db_manager
        self.session = session
        self.today = today

    def import_file(self, source, progress_callback: Callable[[int, int, str], None] = None,
                    on_log: Callable[[str], None] = None) -> ImportReport:
        """Import a workbook file.

        Args:
            source: Path, bytes or binary file object of the workbook.
            progress_callback: Optional ``(current, total, name)`` callback
                invoked after each row.
            on_log: Optional callback receiving each log line as it is added.

        Returns:
            ImportReport describing the outcome. File-level failures are
            reported through ``alert``, never raised.
        """
        require_admin(self.session, "import spreadsheet")
        report = ImportReport()
        try:
            grid = read_workbook_grid(source)
        except ImportFileError as e:
            self._fail_file(report, e, on_log)
            return report
        return self._run(grid, report, progress_callback, on_log)

    def import_grid(self, grid, progress_callback=None, on_log=None) -> ImportReport:
        """Import an already decoded sheet (list of rows of cells)."""
        require_admin(self.session, "import spreadsheet")
        return self._run(grid, ImportReport(), progress_callback, on_log)

    def _run(self, grid, report, progress_callback, on_log) -> ImportReport:
        def log(line):
            report.log.append(line)
            if on_log:
                on_log(line)

        self._transition(report, ImportState.LOCATING_HEADER)
        header_index = find_header_row(grid)
        if header_index is None:
            log(config.MSG_HEADER_NOT_FOUND)
            return self._fail(report, FAILURE_NO_HEADER)
        report.header_row = header_index
        log(config.MSG_HEADER_FOUND.format(row=header_index + 1))

        self._transition(report, ImportState.PARSING_ROWS)
        rows = build_rows(grid, header_index)
        if not rows:
            log(config.MSG_NO_ROWS)
            return self._fail(report, FAILURE_NO_ROWS)
        log(config.MSG_COLUMNS.format(columns=", ".join(rows[0].labels)))
        log(config.MSG_READING_ROWS.format(count=len(rows)))

        self._transition(report, ImportState.INGESTING)
        snapshot = ClientSnapshot(self.db.get_clients())
        ingestor = RowIngestor(self.db, snapshot, log=log, today=self.today)

        total = len(rows)
        for i, row in enumerate(rows, start=1):
            try:
                outcome = ingestor.ingest(row)
            except Exception as e:
                logger.exception("Row %s failed", row.line)
                report.error_count += 1
                log(config.MSG_ROW_ERROR.format(name=row.get(config.COL_HOLDER) or "?", error=e))
                outcome = None
            else:
                if outcome.status == RowStatus.IMPORTED:
                    report.success_count += 1
                    report.total_sum += outcome.total_amount
                    if outcome.client_created:
                        report.clients_created += 1
                elif outcome.status == RowStatus.INVALID:
                    report.error_count += 1

            if progress_callback:
                progress_callback(i, total, outcome.name if outcome else "")

        self._transition(report, ImportState.SUMMARIZING)
        log(config.MSG_DONE.format(success=report.success_count, errors=report.error_count))
        log(config.MSG_TOTAL_SUM.format(total=format_currency(report.total_sum)))
        if report.success_count == 0:
            log(config.MSG_NOTHING_IMPORTED)

        self._transition(report, ImportState.DONE)
        logger.info("Import finished: %d imported, %d errors, %d clients created",
                    report.success_count, report.error_count, report.clients_created)
        return report

    @staticmethod
    def _transition(report, state):
        logger.debug("Import state %s -> %s", report.state.value, state.value)
        report.state = state

    def _fail(self, report, kind):
        self._transition(report, ImportState.FAILED)
        report.failure_kind = kind
        logger.warning("Import failed: %s", kind)
        return report

    def _fail_file(self, report: ImportReport, error: ImportFileError,
                   on_log: Optional[Callable[[str], None]]):
        if isinstance(error, PasswordProtectedFileError):
            line, report.alert = config.MSG_PASSWORD_LOG, config.MSG_PASSWORD_ALERT
            kind = FAILURE_PASSWORD
        else:
            line, report.alert = config.MSG_UNREADABLE_LOG, config.MSG_UNREADABLE_ALERT
            kind = FAILURE_UNREADABLE
        report.log.append(line)
        if on_log:
            on_log(line)
        self._fail(report, kind)
