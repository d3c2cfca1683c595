"""Adapters for the submission endpoint and the payment gateway."""
