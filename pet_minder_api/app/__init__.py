"""
Application package initializer.

This package contains the main entrypoint for the API and all of its
submodules:

* ``core``: configuration, logging, database, authentication and the
  two rule engines (``access`` for ownership checks, ``recurrence``
  for reminder schedules);
* ``schemas``: request and response models;
* ``services``: business logic per resource;
* ``api``: versioned routers.
"""

from .main import app  # noqa: F401
