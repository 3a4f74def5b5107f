"""
Error kinds raised by minty.

Nothing here is recovered locally: every error propagates to the CLI's
main(), which reports it and exits 1.
"""


class MintyError(Exception):
    """Base class for every failure minty reports to the user."""


class InputError(MintyError):
    """Bad input: unreadable file, malformed option or config."""


class AssetReadError(InputError):
    """The asset file could not be read. The store was not contacted."""

    def __init__(self, path, reason):
        self.path = str(path)
        super().__init__(f"Cannot read {self.path}: {reason}")


class ConfigError(InputError):
    """Config file or environment override is unusable."""


class InteractionError(MintyError):
    """The interactive answer session could not complete."""


class StoreError(MintyError):
    """The IPFS API was unreachable, timed out, or rejected the add."""
