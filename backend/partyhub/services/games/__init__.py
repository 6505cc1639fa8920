"""Game domain services: lifecycle, scoring and state projection.

This package contains the domain logic imported by the event router and the
HTTP routes, keeping transport concerns separated from core game mechanics.
"""
