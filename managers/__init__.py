"""
Event routing and feature managers.
"""
