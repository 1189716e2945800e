"""
Responsible Tool Package

Resolves the CRM responsible (Bitrix ASSIGNED_BY_ID) for incoming Shopify orders.
Priority chain: Weekday Schedule → Tag → Country → Source → Default.
"""

__version__ = "1.0.0"
