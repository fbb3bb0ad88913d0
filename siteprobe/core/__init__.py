"""
Core application configuration.
"""
