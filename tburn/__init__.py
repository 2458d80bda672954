"""
TBURN Validator Ranking & Tokenomics Engine

Core imports are lazily loaded so that importing the package does not pull
in the HTTP client or configure logging before it is needed.
For direct module access, import from submodules:

    from tburn.validator import VotingPowerRanker, ValidatorRecord
    from tburn.tokenomics import TokenomicsProjector, EmissionScheduler
    from tburn.live import LiveUpdateReducer
"""

# Lazy imports to avoid loading everything at package import
def __getattr__(name):
    """Lazy module loading."""
    if name == 'VotingPowerRanker':
        from .validator import VotingPowerRanker
        return VotingPowerRanker
    elif name == 'TokenomicsProjector':
        from .tokenomics import TokenomicsProjector
        return TokenomicsProjector
    elif name == 'LiveUpdateReducer':
        from .live import LiveUpdateReducer
        return LiveUpdateReducer
    elif name == 'RegistryClient':
        from .registry import RegistryClient
        return RegistryClient
    elif name == 'load_config':
        from .config import load_config
        return load_config
    raise AttributeError(f"module 'tburn' has no attribute {name!r}")

__all__ = ['VotingPowerRanker', 'TokenomicsProjector', 'LiveUpdateReducer', 'RegistryClient', 'load_config']
