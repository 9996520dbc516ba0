"""Reusable patterns the Boardcamp service is built from.

Each module demonstrates a self-contained pattern: rules engines,
workflow state machines, repository layers, and domain configuration.
"""
