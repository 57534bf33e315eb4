"""
Shoot - Secret handling helpers.
Stored API keys are plaintext at rest and only ever leave the public API masked.
"""


def mask_key(value: str | None) -> str:
    """Show the first and last four characters, or `***` for short values."""
    value = value or ""
    if len(value) <= 8:
        return "***"
    return f"{value[:4]}...{value[-4:]}"
