"""reltrack - report job check-ins and upload release artifacts."""

__version__ = "0.3.0"
