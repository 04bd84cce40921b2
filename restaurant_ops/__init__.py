"""
                Restaurant Operations Backend

Order lifecycle and payment reconciliation service for restaurant
operations: menu catalog lookup, snapshot-priced orders with a guarded
status workflow, and payment settlement with transaction-code
verification, exposed over HTTP with role-based authorization.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
