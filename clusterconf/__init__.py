"""Layered configuration resolver for cluster nodes."""

__version__ = "0.1.0"
