"""finval: validation and normalization for financial onboarding and funding."""

__version__ = "0.1.0"
