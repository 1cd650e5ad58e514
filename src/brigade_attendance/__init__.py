"""Brigade attendance package.

Organized by feature modules (events, brigades, attendance, analytics, ...)
with a thin Flask controller layer over service/repository layers.
"""
