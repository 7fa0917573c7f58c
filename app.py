"""Main entry point for the application."""

import os

from contestbeaters import create_app

app = create_app()


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.environ.get("PORT") or 5000))  # nosec
