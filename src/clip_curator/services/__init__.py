"""Application services.

Functions here take an open SQLAlchemy session; the async orchestration in
:mod:`clip_curator.services.discovery` takes a session factory instead so no
session is held across provider calls.
"""
