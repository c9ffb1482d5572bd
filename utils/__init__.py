"""
Utilities package for the Keyhold identity service.

Error handling, audit logging and signature helpers shared across the app.
"""
