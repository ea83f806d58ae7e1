"""Sign-in desk package.

This package is organized by feature modules (sessions, queue, contacts, roster, ...)
with a thin Flask controller layer on top of service/repository layers that talk to a
header-driven tabular store.
"""
