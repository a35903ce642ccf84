"""Attendance session & break-time accounting engine.

This package is organized by feature modules (attendance, breaks, durations,
policy, reporting) with a thin Flask controller layer over service and
repository layers.
"""
