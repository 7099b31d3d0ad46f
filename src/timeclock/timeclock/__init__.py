"""Timeclock package.

Worker attendance sessions (check-in/check-out against a fixed-zone civil day)
and approver-gated corrections, organized by feature modules (attendance,
corrections, timesheet) with a thin Flask controller layer over service and
repository layers.
"""
