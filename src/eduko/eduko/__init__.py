"""Eduko school core package.

This package is organized by feature modules (users, students, attendance, excuses, ...)
with a thin Flask controller layer and service/repository layers underneath.
"""
