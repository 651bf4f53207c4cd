"""
Command line interface for the txsubmit SDK.
"""
from .main import cli

__all__ = ["cli"]
