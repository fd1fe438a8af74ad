from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()

# attribute that marks a declaration for mirroring, without the leading "@"
MIRROR_ATTRIBUTE = (os.getenv("PROTOCOL_MIRROR_ATTRIBUTE") or "").strip() or "ProtocolMirror"

# reserved interface name scoped under the mirrored type (rendered in backticks)
INTERFACE_NAME = (os.getenv("PROTOCOL_MIRROR_INTERFACE_NAME") or "").strip() or "Protocol"

INDENT_WIDTH = int(os.getenv("PROTOCOL_MIRROR_INDENT", "4"))

LOG_LEVEL = (os.getenv("PROTOCOL_MIRROR_LOG_LEVEL") or "INFO").strip().upper()

SERVICE_URL = os.getenv("PROTOCOL_MIRROR_SERVICE_URL", "http://127.0.0.1:7070")

SWIFT_EXTENSIONS = (".swift",)
