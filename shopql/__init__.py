"""GraphQL e-commerce backend: signup/login, product catalog and orders."""

__version__ = "0.1.0"
