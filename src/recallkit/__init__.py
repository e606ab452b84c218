"""recallkit: SM-2 spaced-repetition scheduling with a local data store."""

from recallkit.consts import VERSION

__version__ = VERSION
