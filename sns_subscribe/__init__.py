"""Subscribe an HTTP(S) endpoint to an SNS topic and confirm the subscription."""

__version__ = "0.1.0"
