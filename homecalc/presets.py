# Input defaults for a fresh calculator session.
DEFAULT_STATE = "CA"
DEFAULT_COUNTY = "1.10"
DEFAULT_PURCHASE_PRICE = 800000.0
DEFAULT_DOWN_PAYMENT_PERCENT = 20.0
DEFAULT_INTEREST_RATE = 6.5
DEFAULT_LOAN_TERM = 30
DEFAULT_ARM_ADJUSTMENT = 0.25
DEFAULT_ARM_CAP = 11.0
DEFAULT_PROPERTY_TAX_RATE = 1.1
DEFAULT_INSURANCE = 2400.0
DEFAULT_PMI_RATE = 0.5
DEFAULT_MAINTENANCE_RATE = 1.0
DEFAULT_UTILITIES = 300.0
DEFAULT_APPRECIATION_RATE = 3.0
DEFAULT_TAX_YEAR = 2025
DEFAULT_ANNUAL_INCOME = 480000.0
DEFAULT_RENT = 3000.0
DEFAULT_RENT_INCREASE = 3.0
DEFAULT_INVEST_RETURN = 7.0

# Closing cost schedule.  Rates are fractions of loan or price, fees are flat $.
LOAN_ORIGINATION_RATE = 0.0075
APPRAISAL_FEE = 600.0
CREDIT_REPORT_FEE = 50.0
TITLE_INSURANCE_RATE = 0.003
ESCROW_FEE_RATE = 0.002
RECORDING_FEES = 200.0
NOTARY_FEES = 200.0
HOME_INSPECTION_FEE = 500.0
PEST_INSPECTION_FEE = 150.0
HOA_TRANSFER_FEE = 500.0
PREPAID_INTEREST_DAYS = 15
PREPAID_PROPERTY_TAX_MONTHS = 2
ESCROW_RESERVE_MONTHS = 2

# PMI is charged below this down-payment percent.  It auto-cancels at 78% of the
# original price and can be requested at 80% of the appreciated value.
PMI_REQUIRED_THRESHOLD = 20.0
PMI_AUTO_REMOVAL_LTV = 0.78
PMI_REQUEST_REMOVAL_LTV = 80.0
PMI_MAX_MONTHS = 360

# Affordability search.
FRONT_END_DTI_RATIO = 0.28
FALLBACK_ANNUAL_INCOME = 150000.0
AFFORDABILITY_MIN_PRICE = 50000
AFFORDABILITY_MAX_PRICE = 10000000
AFFORDABILITY_ITERATIONS = 30
AFFORDABILITY_ROUNDING = 1000

# Tax treatment.
MORTGAGE_INTEREST_LOAN_CAP = 750000.0
EFFECTIVE_TAX_THRESHOLDS = (50000, 100000, 200000, 400000, 1000000)
FALLBACK_FEDERAL_RATE = 37.0
FALLBACK_STATE_TOP_RATE = 13.3

# Projection windows.
SCHEDULE_YEARS = 10
EXTRA_PAYMENT_TOLERANCE = 0.01
