"""
Strata CLI.

Usage:
    strata openapi export app.main:registry --output openapi.json
    strata openapi check app.main:registry
    strata routes app.main:registry
"""

__cli_name__ = "strata"
