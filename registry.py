from config import SWIFT_EXTENSIONS
from adapters.swift_adapter import SwiftAdapter
swift_adapter = SwiftAdapter()

def try_parse_best(code: str, filename: str | None):
    if filename is None or filename.endswith(SWIFT_EXTENSIONS):
        return swift_adapter.parse_units(code, filename)
    else:
        return {"error": f"Unsupported file type for Swift parser: {filename}"}
