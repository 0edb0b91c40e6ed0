"""Development entry point: ``python app.py``.

Settings come from ``APP_ENV`` (see ``config``); the app itself is built by
:func:`hr_records.main.create_app`.
"""
import os

from hr_records.main import create_app

app = create_app()

if __name__ == "__main__":
    app.run(
        host=os.getenv("FLASK_RUN_HOST", "127.0.0.1"),
        port=int(os.getenv("FLASK_RUN_PORT", "5000")),
        debug=app.config["DEBUG"],
    )
