"""Configuration and settings."""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

# Paths
PROJECT_ROOT = Path(__file__).resolve().parent.parent
OUTPUT_DIR = PROJECT_ROOT / "output"

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
VERBOSE_LOGGING = os.getenv("VERBOSE_LOGGING", "false").lower() == "true"
LOG_TO_FILE = os.getenv("LOG_TO_FILE", "false").lower() == "true"
LOG_FILE = Path(os.getenv("LOG_FILE", str(OUTPUT_DIR / "logs" / "app.jsonl")))

# Inbound payload dumps are off by default (no size cap upstream, can be large).
LOG_NOTIFICATION_PAYLOADS = os.getenv("LOG_NOTIFICATION_PAYLOADS", "false").lower() == "true"
LOG_PAYLOAD_MAX_CHARS = int(os.getenv("LOG_PAYLOAD_MAX_CHARS", "2000"))

# Webhook listener
WEBHOOK_HOST = os.getenv("WEBHOOK_HOST", "0.0.0.0")
WEBHOOK_PORT = int(os.getenv("WEBHOOK_PORT", "7071"))

# Azure Service Bus (destination coordinates)
SERVICE_BUS_CONNECTION_STRING = os.getenv("SERVICE_BUS_CONNECTION_STRING", "")
SERVICE_BUS_QUEUE_NAME = os.getenv("SERVICE_BUS_QUEUE_NAME", "")


class ServiceBusSettings(BaseModel):
    """Destination coordinates for the queue publisher."""

    connection_string: str = ""
    queue_name: str = ""

    model_config = {"frozen": True}

    @property
    def is_configured(self) -> bool:
        return bool(self.connection_string.strip() and self.queue_name.strip())

    def redacted_connection_string(self) -> str:
        """Connection string with SharedAccessKey value masked, for display."""
        parts = []
        for part in self.connection_string.split(";"):
            key, sep, _ = part.partition("=")
            if sep and key.strip().lower() == "sharedaccesskey":
                parts.append(f"{key}=***")
            else:
                parts.append(part)
        return ";".join(parts)


def load_service_bus_settings() -> ServiceBusSettings:
    """Build ServiceBusSettings from environment (.env supported)."""
    return ServiceBusSettings(
        connection_string=SERVICE_BUS_CONNECTION_STRING,
        queue_name=SERVICE_BUS_QUEUE_NAME,
    )
