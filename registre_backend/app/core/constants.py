# app/core/constants.py
"""Unit conversion rates and identifiers shared by the register export."""

RATE_CONVERSION_SECONDS_TO_MINUTES = 60
RATE_CONVERSION_SECONDS_TO_HOURS = 3600

# Export kind used to look up limits in ``export_configurations``.
REGISTRE_EXPORT_TYPE = "registre"

PDF_MEDIA_TYPE = "application/pdf"
