"""
Herald - Email notification actions for triggered alerts.

This package parses email action definitions, renders a report from an
alert's trigger result and delivers it over SMTP using a hot-reloadable
global mail configuration.
"""

__version__ = "0.1.0"
