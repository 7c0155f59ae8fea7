"""
payroll_api -- HTTP surface of the payroll compliance core.

Thin FastAPI layer: request parsing, tenant/actor headers, and the
mapping of typed payroll errors to status codes.  All behavior lives in
payroll_services and payroll_engines.
"""

from payroll_api.app import create_app

__all__ = ["create_app"]
