"""Centralized configuration for chequebook.

This module contains the default values, spreadsheet layout conventions and
user-facing messages shared by manual entry and the spreadsheet import.
"""

# =============================================================================
# LOAN DEFAULTS
# =============================================================================

# Default interest rate, as a percentage of the principal (1.2%)
DEFAULT_INTEREST_RATE = 1.2

# Days added to the loan date when suggesting a due date
DEFAULT_TERM_DAYS = 30

# Loan statuses
STATUS_PENDING = "pending"
STATUS_PAID = "paid"
LOAN_STATUSES = (STATUS_PENDING, STATUS_PAID)

# =============================================================================
# ROLES
# =============================================================================

ROLE_USER = "user"
ROLE_ADMIN = "admin"

# =============================================================================
# SPREADSHEET LAYOUT
# =============================================================================

# Column labels (matched trimmed and case-insensitively)
COL_HOLDER = "TITULAR"
COL_AMOUNT = "VALORES"
COL_INTEREST = "VALOR DO JUROS"
COL_TOTAL = "TOTAL"
COL_LOAN_DATE = "DATA DO EMPRESTIMO"
COL_DUE_DATE = "DATA DO VENCIMENTO"

# The header row is the first row containing this label
HEADER_ANCHOR = COL_HOLDER

# Number of leading rows searched for the header
HEADER_SCAN_ROWS = 10

# Serial number of 1970-01-01 in the 1900 spreadsheet date system
EXCEL_EPOCH_SERIAL = 25569

# =============================================================================
# DISPLAY FORMATS
# =============================================================================

# Date format for storage (ISO 8601)
DATE_FORMAT_STORAGE = "%Y-%m-%d"

# Date format for display
DATE_FORMAT_DISPLAY = "%d/%m/%Y"

CURRENCY_SYMBOL = "R$"

# Loans shown per page on the portfolio listing
ITEMS_PER_PAGE = 8

# =============================================================================
# IMPORT MESSAGES
# =============================================================================

MSG_HEADER_NOT_FOUND = "ERRO: Não encontrei a coluna 'TITULAR' nas primeiras 10 linhas."
MSG_HEADER_FOUND = "Cabeçalho encontrado na linha {row}."
MSG_NO_ROWS = "ERRO: Nenhuma linha de dados encontrada após o cabeçalho."
MSG_COLUMNS = "Colunas: {columns}"
MSG_READING_ROWS = "Lendo {count} linhas..."
MSG_CREATING_CLIENT = "Criando cliente: {name}"
MSG_INVALID_ROW = "Dados inválidos para: {name}"
MSG_DUE_DATE_DEFAULTED = "Vencimento inválido para: {name} (usando a data de hoje)"
MSG_ROW_ERROR = "Erro ao importar linha de {name}: {error}"
MSG_DONE = "Concluído! {success} importados, {errors} erros."
MSG_TOTAL_SUM = "Soma Total Importada: {total}"
MSG_NOTHING_IMPORTED = "⚠️ Nada importado. Verifique os nomes das colunas acima."

MSG_PASSWORD_LOG = "ERRO: Arquivo protegido por senha."
MSG_PASSWORD_ALERT = "Este arquivo está protegido por senha. Remova a senha no Excel e tente novamente."
MSG_UNREADABLE_LOG = "Erro crítico ao importar arquivo."
MSG_UNREADABLE_ALERT = "Erro ao ler o arquivo. Verifique se é um Excel válido."

# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL_ENV = "CHEQUEBOOK_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"
