"""
Business services for Teacha.
"""
