"""Legajos - API services
Business operations shared by the route handlers.
"""
