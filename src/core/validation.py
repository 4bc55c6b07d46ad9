"""
Payload validation helpers.
"""


def error_messages(exc) -> list[str]:
    """
    Flatten a pydantic (or FastAPI request) validation error into readable messages.

    Example: ["name: Event name is required", "Event end must not be before its start"]
    """
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("__root__", "body"))
        message = error.get("msg", "Invalid value")
        # pydantic prefixes messages raised from validators
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        messages.append(f"{location}: {message}" if location else message)
    return messages


def missing_fields(data: dict, required: list[str]) -> list[str]:
    """Messages for required keys that are absent or blank."""
    errors = []
    for key in required:
        value = data.get(key)
        if value is None or (isinstance(value, str) and not value.strip()):
            errors.append(f"{key}: Field required")
    return errors
