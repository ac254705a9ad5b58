import os
import re

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))

DATA_DIR = os.getenv("DATA_DIR", os.path.join(os.getcwd(), "data"))
SHARED_STATE_FILE = "shared-state.json"
FEEDBACK_FILE = "feedback-state.json"

ADMIN_TOKEN = os.getenv("ADMIN_TOKEN", "change-me-admin-token")

# Unset means file-only persistence for the whole process lifetime.
DATABASE_URL = os.getenv("DATABASE_URL") or None
DB_TIMEOUT_SECONDS = float(os.getenv("DB_TIMEOUT_SECONDS", "5"))
GLOBAL_CONFIG_KEY = "global-config"

PERSIST_DEBOUNCE_MS = int(os.getenv("PERSIST_DEBOUNCE_MS", "150"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE") or None

ROOM_KEY_PATTERN = re.compile(r"^room:[A-Z0-9]{6}$")
HEX_COLOR_PATTERN = re.compile(r"^#[0-9a-fA-F]{6}$")

KNOWN_ACTIVITIES = (
    "trivia",
    "wouldYouRather",
    "neverHaveIEver",
    "twoTruths",
    "charades",
    "pictionary",
    "icebreakers",
    "riddles",
)

FEATURE_FLAGS = (
    "enableFeedbackHub",
    "enableActivityQueue",
    "enableScheduleMeeting",
    "enableLoadSession",
    "enableAIGenerator",
    "enableSampleQuestions",
)

DEFAULT_BRANDING = {
    "appName": "Player Hub",
    "tagline": "Team building, games, and challenges - all in one place",
    "accent": "#00d2d3",
}

FEEDBACK_TYPES = ("ui", "idea", "bug", "general")
FEEDBACK_STATUSES = ("open", "in_review", "resolved")

__all__ = [
    "HOST",
    "PORT",
    "DATA_DIR",
    "SHARED_STATE_FILE",
    "FEEDBACK_FILE",
    "ADMIN_TOKEN",
    "DATABASE_URL",
    "DB_TIMEOUT_SECONDS",
    "GLOBAL_CONFIG_KEY",
    "PERSIST_DEBOUNCE_MS",
    "LOG_LEVEL",
    "LOG_FILE",
    "ROOM_KEY_PATTERN",
    "HEX_COLOR_PATTERN",
    "KNOWN_ACTIVITIES",
    "FEATURE_FLAGS",
    "DEFAULT_BRANDING",
    "FEEDBACK_TYPES",
    "FEEDBACK_STATUSES",
]
