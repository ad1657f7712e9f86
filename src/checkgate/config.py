import os
import logging

import dotenv

dotenv.load_dotenv()

GITHUB_TOKEN = os.environ.get("GITHUB_TOKEN")
GITHUB_API_URL = os.environ.get("GITHUB_API_URL", "https://api.github.com")

# Context of the workflow run that invokes us, if any
GITHUB_REPOSITORY = os.environ.get("GITHUB_REPOSITORY")
GITHUB_SHA = os.environ.get("GITHUB_SHA")
GITHUB_RUN_ID = os.environ.get("GITHUB_RUN_ID")
GITHUB_OUTPUT = os.environ.get("GITHUB_OUTPUT")

OVERRIDE_LOGGING = logging.getLevelName(os.environ.get("OVERRIDE_LOGGING", "INFO"))

TELEGRAM_TOKEN = os.environ.get("TELEGRAM_TOKEN")
TELEGRAM_CHAT_ID = os.environ.get("TELEGRAM_CHAT_ID")

PUSH_GATEWAY = os.environ.get("PUSH_GATEWAY")

HTTP_CACHE_SIZE = int(os.environ.get("HTTP_CACHE_SIZE", 500))
