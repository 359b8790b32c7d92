"""
Offer Pricing Package

Ticket pricing for event bookings.
Resolves which event offers apply to a booking and computes the
final total, per-ticket price and savings breakdown.
"""

__version__ = "1.0.0"
