"""SpendFlow: monthly spend report from bank notification e-mails."""

__version__ = "1.0.0"
