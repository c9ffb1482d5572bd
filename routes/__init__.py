"""
Routes package for the Keyhold identity service.
"""
