"""Command line entry point for chequebook."""
import argparse
import logging
import os
import sys
from datetime import date, datetime

from chequebook.calculator import suggest_due_date
from chequebook.config import DATE_FORMAT_STORAGE, DATE_FORMAT_DISPLAY, LOG_LEVEL_ENV
from chequebook.database import DatabaseManager
from chequebook.exceptions import ChequebookError
from chequebook.logging_config import configure_logging
from chequebook.normalizers import format_currency
from chequebook.reports import PortfolioReport
from chequebook.services import ClientService, ImportService, LoanService
from chequebook.session import SessionManager

logger = logging.getLogger("chequebook")


def _parse_date(text):
    try:
        return datetime.strptime(text, DATE_FORMAT_STORAGE).date()
    except ValueError:
        return datetime.strptime(text, DATE_FORMAT_DISPLAY).date()


def _parse_year(text):
    if text.strip().lower() == "all":
        return "all"
    try:
        return int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid year: {text!r} (use a year or 'all')")


def build_parser():
    parser = argparse.ArgumentParser(prog="chequebook", description="Loan tracking and spreadsheet import.")
    parser.add_argument("--db", default=os.getenv("CHEQUEBOOK_DB", "chequebook.db"), help="SQLite database file")
    parser.add_argument("--uid", default=os.getenv("CHEQUEBOOK_UID", ""), help="Signed-in user id")
    parser.add_argument("--log-level", default=os.getenv(LOG_LEVEL_ENV, "WARNING"))
    parser.add_argument("--log-file", default=None)

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("import", help="Import loans from a workbook")
    p.add_argument("file")

    p = sub.add_parser("loans", help="List loans")
    p.add_argument("--search", default="")
    p.add_argument("--year", type=_parse_year, default=date.today().year,
                   help="Loan year or 'all' (default: current year)")
    p.add_argument("--page", type=int, default=1)

    p = sub.add_parser("clients", help="List clients")
    p.add_argument("--search", default="")

    p = sub.add_parser("add-client", help="Register a client")
    p.add_argument("name")
    p.add_argument("--phone", default="")
    p.add_argument("--email", default="")
    p.add_argument("--cpf", default="")
    p.add_argument("--address", default="")

    p = sub.add_parser("add-loan", help="Issue a loan")
    p.add_argument("client_id", type=int)
    p.add_argument("amount", type=float)
    p.add_argument("due_date", type=_parse_date, nargs="?", default=None,
                   help="Due date (default: 30 days after the loan date)")
    p.add_argument("--loan-date", type=_parse_date, default=None)
    p.add_argument("--rate", type=float, default=None)
    p.add_argument("--document", default="")

    p = sub.add_parser("pay", help="Mark a loan as paid")
    p.add_argument("loan_id", type=int)
    p.add_argument("--date", type=_parse_date, default=None)

    p = sub.add_parser("reverse", help="Reverse a loan payment")
    p.add_argument("loan_id", type=int)

    p = sub.add_parser("set-role", help="Change a user's role")
    p.add_argument("target_uid")
    p.add_argument("role", choices=["user", "admin"])

    return parser


def _print_loans(report, page):
    for loan in report.page(page):
        print(f"{loan['id']:>5}  {loan['loan_date']}  {loan['client_name']:<30} "
              f"{format_currency(loan['total_amount']):>16}  {loan['status']}")
    summary = report.summary()
    print(f"Total: {format_currency(summary['total'])}  "
          f"Recebido: {format_currency(summary['received'])}  "
          f"Pendente: {format_currency(summary['pending'])}  "
          f"(página {page}/{max(report.total_pages(), 1)})")


def run(args):
    with DatabaseManager(args.db) as db:
        sessions = SessionManager(db)
        session = sessions.sign_in(args.uid) if args.uid else None

        if args.command == "set-role":
            sessions.set_role(args.target_uid, args.role)
            print(f"{args.target_uid}: {args.role}")
            return 0

        if args.command == "import":
            report = ImportService(db, session).import_file(args.file, on_log=print)
            if report.alert:
                print(report.alert, file=sys.stderr)
            return 0 if report.succeeded else 1

        if args.command == "loans":
            report = PortfolioReport(db.get_loans()).filter(args.search, args.year)
            _print_loans(report, args.page)
            return 0

        clients = ClientService(db, session)
        loans = LoanService(db, session)

        if args.command == "clients":
            for client in clients.search_clients(args.search):
                print(f"{client['id']:>5}  {client['name']:<30} {client['phone']:<15} {client['email']}")
        elif args.command == "add-client":
            client_id = clients.add_client(args.name, args.phone, args.email, args.cpf, args.address)
            print(client_id)
        elif args.command == "add-loan":
            loan_date = args.loan_date or datetime.now().date()
            due_date = args.due_date or suggest_due_date(loan_date)
            loan_id = loans.add_loan(args.client_id, args.amount, loan_date, due_date,
                                     args.rate, args.document)
            print(loan_id)
        elif args.command == "pay":
            loans.mark_paid(args.loan_id, args.date)
        elif args.command == "reverse":
            loans.reverse_payment(args.loan_id)
        return 0


def main(argv=None):
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level, args.log_file)
    try:
        return run(args)
    except ChequebookError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
