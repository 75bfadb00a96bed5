"""
Teacha

Multi-tenant course platform backend. Tenants sign up with an owner account,
invite users, publish courses with ordered lessons and track student
enrollments. Authentication uses signed bearer tokens carrying the user's
role and tenant.
"""

__version__ = "1.0.0"
__author__ = "Teacha Team"
