"""Language server for git commit messages with issue tracker completion."""

__version__ = "0.2.0"
