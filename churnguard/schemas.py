"""
Data schema definitions for churn scoring.

Uses Pandera for runtime validation of the scoring frame and of
results returned by analysis providers, so malformed data is caught
before anything is written back to a customer.
"""

import pandera as pa
from pandera import Column, Check, DataFrameSchema

from .config import RISK_LEVEL_ORDER


# Schema for the prepared scoring frame
SCORING_INPUT_SCHEMA = DataFrameSchema(
    {
        "TOTAL_REVENUE": Column(
            float,
            nullable=False,
            coerce=True,
            description="Total revenue, unparsable values already defaulted to 0"
        ),
        "SUPPORT_TICKETS": Column(
            int,
            nullable=False,
            coerce=True,
            description="Support tickets raised"
        ),
        "DAYS_INACTIVE": Column(
            float,
            nullable=True,  # Missing or unparseable dates
            coerce=True,
            description="Whole days since last activity"
        ),
        "ACTIVITY_STATUS": Column(
            str,
            nullable=False,
            checks=Check.isin(["valid", "invalid", "missing"]),
            description="Whether the last activity date was usable"
        ),
    },
    strict=False,  # Customer details travel along
    description="Schema for churn scoring input data"
)


# Schema for scoring output data
SCORING_OUTPUT_SCHEMA = DataFrameSchema(
    {
        "CHURN_SCORE": Column(
            int,
            nullable=False,
            checks=[
                Check.greater_than_or_equal_to(0),
                Check.less_than_or_equal_to(100),
            ]
        ),
        "RISK_LEVEL": Column(
            str,
            nullable=False,
            checks=Check.isin(RISK_LEVEL_ORDER)
        ),
    },
    strict=False,  # Allow component columns
    description="Schema for churn scoring output data"
)


# Schema for results returned by analysis providers
ANALYSIS_RESULT_SCHEMA = DataFrameSchema(
    {
        "customerId": Column(str, nullable=False, coerce=True),
        "churnScore": Column(
            int,
            nullable=False,
            coerce=True,
            checks=[
                Check.greater_than_or_equal_to(0),
                Check.less_than_or_equal_to(100),
            ]
        ),
        "riskLevel": Column(
            str,
            nullable=False,
            checks=Check.isin(RISK_LEVEL_ORDER)
        ),
    },
    strict=False,  # riskFactors and recommendedAction are optional
    description="Schema for churn analysis results"
)

SchemaError = pa.errors.SchemaError
