"""Custom exceptions for Account Store."""


class AccountStoreError(Exception):
    """Base exception for Account Store errors."""


class AccountExistsError(AccountStoreError):
    """Account with given email already exists."""
