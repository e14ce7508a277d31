"""
Core module - configuration, logging, authentication and permissions.
"""
