"""Timekeeper package.

Staff attendance for the agency operations platform, organized by feature
modules (attendance, users, notifications, ...) with a thin Flask controller
layer over service/repository layers.
"""
