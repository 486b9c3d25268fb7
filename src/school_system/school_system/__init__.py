"""School system package.

Organized by feature modules (users, workshops, attendance, closure, ...)
with a thin Flask controller layer over service/repository layers. The
closure module holds the year-end rollover: archive, ledger, promotion and
cleanup of one academic year.
"""
