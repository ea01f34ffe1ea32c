# env vars + constants
import os

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# ":memory:" keeps events in process memory only
DATA_FILE = os.getenv("DATA_FILE", "events.json")

EVENT_ID_BYTES = int(os.getenv("EVENT_ID_BYTES", "3"))
MAX_ID_ATTEMPTS = int(os.getenv("MAX_ID_ATTEMPTS", "100"))

VOTE_URL_TEMPLATE = os.getenv("VOTE_URL_TEMPLATE", "/vote.html?id={id}")
RESULTS_URL_TEMPLATE = os.getenv("RESULTS_URL_TEMPLATE", "/results.html?id={id}")

MIN_OPTIONS = 2
MAX_OPTIONS = 30
MAX_NAME_LENGTH = 50
