"""Sample statement CSVs shared across tests."""

# Sample statements for each bank layout. Every layout's first row is the
# same $99.80 debit on 2025-10-20.
CHASE_CSV = (
    "Details,Posting Date,Description,Amount,Type,Balance,Check or Slip #\n"
    'DEBIT,10/20/2025,"PwP  Privacy.com Privacycom TN: 5199481     WEB ID:  626060084",-99.80,MISC_DEBIT,7139.41,,\n'
    'CREDIT,10/17/2025,"Online Transfer from CHK ...3515 transaction#: 26622174224",4000.00,ACCT_XFER,7239.21,,\n'
)

WELLS_FARGO_CSV = (
    "Date,Amount,*,*,Description\n"
    '10/20/2025,-99.80,,,"Privacy.com Payment"\n'
    '10/17/2025,4000.00,,,"Online Transfer"\n'
)

SCHWAB_CSV = (
    "Date,Action,Symbol,Description,Amount\n"
    '10/20/2025,DEBIT,,"Privacy.com Payment",-99.80\n'
    '10/17/2025,DEPOSIT,,"Online Transfer",4000.00\n'
)

# Parenthesized amounts are debits in this layout
BANK_OF_AMERICA_CSV = (
    "Posted Date,Payee,Address,Amount\n"
    "10/20/2025,Privacy.com,,($99.80)\n"
    "10/17/2025,Online Transfer,,-$4000.00\n"
)

SIMPLE_CSV = (
    "Date,Description,Amount\n"
    "10/20/2025,Privacy.com Payment,-99.80\n"
    "10/17/2025,Online Transfer,4000.00\n"
)

LAYOUTS = {
    "chase": CHASE_CSV,
    "wells_fargo": WELLS_FARGO_CSV,
    "schwab": SCHWAB_CSV,
    "bank_of_america": BANK_OF_AMERICA_CSV,
    "simple": SIMPLE_CSV,
}

DEBIT_CREDIT_CSV = (
    "Transaction Date,Posted Date,Card No.,Description,Category,Debit,Credit\n"
    "2025-01-01,2025-01-02,1234,Coffee Shop,Dining,4.50,\n"
    "2025-01-03,2025-01-03,1234,Refund Store,Shopping,,20.00\n"
)

TWO_COLUMN_CSV = "Date,Description\n10/20/2025,Test Payment\n"

# Split columns whose headers also carry "Amount"
DEBIT_CREDIT_AMOUNT_CSV = (
    "Date,Description,Debit Amount,Credit Amount\n"
    "10/20/2025,Privacy.com Payment,99.80,\n"
    "10/17/2025,Online Transfer,,4000.00\n"
)
