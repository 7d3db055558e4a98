"""CLI commands package."""

from stepfun_nodes.cli.commands import tts, asr, credentials, assets

__all__ = [
    'tts',
    'asr',
    'credentials',
    'assets',
]
