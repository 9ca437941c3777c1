"""Business logic services.

Services contain all payout/scoring logic and are called by routes.
Module-level functions take an `AsyncSession` explicitly; `PayoutService`
owns the session scope and is the object routes talk to.
"""
