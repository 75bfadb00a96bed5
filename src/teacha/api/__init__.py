"""
HTTP API: application, middleware and routes.
"""
