#!/usr/bin/env python3
import os

from dotenv import load_dotenv

# Load environment variables from .env file before the config classes read them
load_dotenv()

from rentcore_backend import create_app  # noqa: E402

app = create_app()

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5000))
    app.run(host='0.0.0.0', port=port, debug=False)
