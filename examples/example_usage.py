"""Example: drive a running HR records service through the client layer.

Start the server first (``python app.py`` with a seeded database), then::

    python examples/example_usage.py
"""

import logging
import os

from hr_records.client.api import HRApiClient
from hr_records.client.notifier import ToastNotifier
from hr_records.client.page import RecordPage


def main():
    logging.basicConfig(level=logging.INFO)
    api = HRApiClient(os.getenv("HR_API_URL", "http://127.0.0.1:5000"))
    api.login("hrd@example.com", "password")

    notifier = ToastNotifier(on_show=lambda t: print(f"[{t.kind}] {t.message}"))
    page = RecordPage(api, "transfers", notifier=notifier)
    page.load()
    print(f"{len(page.records)} transfers, {len(page.roster)} active employees")

    form = page.new_form()
    form.search_employee(os.getenv("EXAMPLE_EMPLOYEE", "Doe"))
    if form.employee_id is None and form.filtered_employees:
        form.choose_employee(form.filtered_employees[0])
    form.set("to_department", "Production")
    form.set("transfer_date", "2026-01-15")
    form.set("reason", "Line rebalancing")
    if page.submit(form):
        created = page.records[0] if page.records else None
        if created and page.can_edit(created):
            page.decide(created, "approved", "Approved by HR")
    else:
        print("Form errors:", form.errors)

    page.close()
    api.logout()


if __name__ == "__main__":
    main()
