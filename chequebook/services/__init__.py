"""Services package for chequebook business logic.

This package contains the manual-entry services and the pieces of the
spreadsheet import pipeline.
"""

from .client_service import ClientService
from .loan_service import LoanService
from .import_service import ImportService
from .row_ingestor import RowIngestor, ClientSnapshot
from .header_locator import find_header_row, build_rows
from .sheet_reader import read_workbook_grid

__all__ = ['ClientService', 'LoanService', 'ImportService', 'RowIngestor', 'ClientSnapshot',
           'find_header_row', 'build_rows', 'read_workbook_grid']
