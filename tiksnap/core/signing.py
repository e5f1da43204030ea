"""Request signer plumbing.

The X-Bogus algorithm itself lives outside this package. A signer is any
callable taking the exact request URL and the client user agent and
returning the signature token.
"""

import importlib
from typing import Callable

from tiksnap.core.exceptions import SignerLoadError
from tiksnap.utils.logging import get_logger

logger = get_logger(__name__)

RequestSigner = Callable[[str, str], str]


def blank_signer(url: str, user_agent: str) -> str:
    """Signer used when none is configured. TikTok usually answers with an empty body."""
    return ""


def load_signer(path: str) -> RequestSigner:
    """
    Import a signer from a ``package.module:attribute`` path.

    Args:
        path: Import path, e.g. ``my_helpers.xbogus:sign``

    Returns:
        The signer callable

    Raises:
        SignerLoadError: If the path is malformed, the import fails or the
            attribute is not callable
    """
    module_name, sep, attr = (path or "").partition(":")
    if not sep or not module_name or not attr:
        raise SignerLoadError(f"Signer must be given as 'module:attribute', got {path!r}")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise SignerLoadError(f"Cannot import signer module {module_name!r}: {e}") from e

    signer = getattr(module, attr, None)
    if not callable(signer):
        raise SignerLoadError(f"{path!r} is not a callable signer")

    logger.debug(f"Loaded request signer {path}")
    return signer
