"""Asset discovery for bundled message catalogs.

Locates the default interface messages shipped inside the customsidebar package.
"""

from importlib.resources import files
from pathlib import Path


def get_messages_dir() -> Path:
    """Return path to bundled message catalogs.

    Returns:
        Path to the i18n directory containing <lang>.json catalogs.

    Raises:
        FileNotFoundError: If the catalogs are not bundled.
    """
    messages = files("customsidebar").joinpath("i18n")
    if not messages.is_dir():
        msg = (
            "Bundled message catalogs not found. "
            "Reinstall the package with 'pip install -e .'."
        )
        raise FileNotFoundError(msg)
    return Path(str(messages))
