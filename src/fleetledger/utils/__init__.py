"""Utility functions for fleetledger."""

from fleetledger.utils.date_parser import parse_date, parse_timestamp
from fleetledger.utils.amount_parser import parse_amount
from fleetledger.utils.logger import configure_logging, get_logger

__all__ = ["parse_date", "parse_timestamp", "parse_amount", "configure_logging", "get_logger"]
