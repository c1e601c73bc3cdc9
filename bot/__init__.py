"""
Bot client, configuration and persistence.
"""
