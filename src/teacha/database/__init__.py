"""
Database connection, session management and models.
"""
