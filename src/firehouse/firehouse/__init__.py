"""Firehouse roster package.

Feature modules (positions, assignments, events, attendance) each carry a
domain model, a repository interface with its MySQL implementation, a service
holding the business rules and a thin Flask controller. The lifecycle package
wraps every command in a single database transaction.
"""
