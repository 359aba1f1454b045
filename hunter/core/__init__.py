"""
Core infrastructure for the Hunter backend.

Configuration, logging, database access, the in-process event bus, session
storage and infrastructure exceptions. Nothing in this package knows about
progression rules.
"""
