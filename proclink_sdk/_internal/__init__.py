"""Internal modules for Proclink SDK.

WARNING: This package contains the dispatch machinery behind the public
client. Import from ``proclink_sdk`` instead of these modules where possible.

Modules:
    link - Operation dispatch, batching and response correlation
    http - Shared HTTP client configuration
"""
