"""Custom exceptions for chequebook."""


class ChequebookError(Exception):
    """Base exception for all chequebook errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class DatabaseError(ChequebookError):
    """Raised when a store operation fails."""
    pass


class TransactionError(DatabaseError):
    """Raised when a database transaction fails to complete."""
    pass


class ValidationError(ChequebookError):
    """Raised when a record fails validation before being stored."""

    def __init__(self, message: str, field: str = None):
        details = {'field': field} if field else {}
        super().__init__(message, details)
        self.field = field


class ClientNotFoundError(ChequebookError):
    """Raised when a client cannot be found."""

    def __init__(self, client_id=None, name: str = None):
        details = {}
        if client_id:
            details['client_id'] = client_id
        if name:
            details['name'] = name

        message = "Client not found"
        if name:
            message = f"Client '{name}' not found"
        elif client_id:
            message = f"Client with ID {client_id} not found"

        super().__init__(message, details)


class LoanNotFoundError(ChequebookError):
    """Raised when a loan cannot be found."""

    def __init__(self, loan_id=None):
        details = {'loan_id': loan_id} if loan_id else {}
        message = "Loan not found"
        if loan_id:
            message = f"Loan {loan_id} not found"
        super().__init__(message, details)


class PermissionDeniedError(ChequebookError):
    """Raised when the current session may not perform an action."""

    def __init__(self, action: str, uid: str = None):
        details = {'action': action}
        if uid:
            details['uid'] = uid
        super().__init__(f"Permission denied: {action}", details)


class ImportFileError(ChequebookError):
    """Raised when the workbook itself cannot be read or decoded."""
    pass


class PasswordProtectedFileError(ImportFileError):
    """Raised when the workbook is encrypted with a password."""
    pass


class UnreadableFileError(ImportFileError):
    """Raised when the workbook is not a readable spreadsheet."""
    pass
