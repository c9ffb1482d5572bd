"""
Services package for the Keyhold identity service.

This package contains the business logic that maps public keys to users.
"""
