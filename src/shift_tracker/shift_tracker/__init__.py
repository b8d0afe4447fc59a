"""Shift Tracker package.

Organized by feature modules (shifts, users, notifications) with a thin Flask
controller layer on top of service/repository layers. The shift lifecycle and
time accounting live in ``shifts`` and have no I/O of their own.
"""
