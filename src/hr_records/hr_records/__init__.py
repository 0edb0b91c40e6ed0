"""HR records package.

Organized by feature modules (corehr, travel_orders, schedules, ...) with a
thin Flask JSON controller layer over service/repository layers, plus a
Python client (``hr_records.client``) for the record pages.
"""
