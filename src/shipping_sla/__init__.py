"""
Shipping SLA v1

Confirm-deadline tracking for marketplace and website orders.
Suggests a carrier per order, flags orders as safe/warning/expired against the
platform-carrier deadline matrix, and ranks them for triage.
"""

__version__ = "1.0.0"
