"""chequebook: loan tracking with spreadsheet import."""

__version__ = "1.0.0"
