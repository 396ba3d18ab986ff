"""
VCS provider layer for Aura Pulse.

Providers fetch raw repository facts and hand the scorers typed snapshots.
"""

from aura_pulse.vcs.base import BaseVCSProvider, RateLimitError
from aura_pulse.vcs.github import GitHubProvider

__all__ = [
    "BaseVCSProvider",
    "GitHubProvider",
    "RateLimitError",
    "get_vcs_provider",
    "register_vcs_provider",
    "list_supported_platforms",
]

# Registry of supported VCS providers
_PROVIDERS: dict[str, type[BaseVCSProvider]] = {
    "github": GitHubProvider,
}


def get_vcs_provider(platform: str = "github", **kwargs) -> BaseVCSProvider:
    """
    Factory function to get a VCS provider instance.

    Args:
        platform: VCS platform name. Default: 'github'
        **kwargs: Provider-specific configuration (e.g., token)

    Raises:
        ValueError: If platform is not supported

    Example:
        >>> provider = get_vcs_provider("github", token="ghp_xxx")
    """
    platform_lower = platform.lower()

    if platform_lower not in _PROVIDERS:
        supported = ", ".join(sorted(_PROVIDERS.keys()))
        raise ValueError(
            f"Unsupported VCS platform: {platform}. Supported platforms: {supported}"
        )

    return _PROVIDERS[platform_lower](**kwargs)


def register_vcs_provider(platform: str, provider_class: type[BaseVCSProvider]) -> None:
    """
    Register a custom VCS provider.

    Args:
        platform: Platform identifier (e.g., 'gitlab', 'gitea')
        provider_class: Class implementing BaseVCSProvider interface

    Raises:
        TypeError: If provider_class doesn't inherit from BaseVCSProvider
    """
    if not (
        isinstance(provider_class, type)
        and issubclass(provider_class, BaseVCSProvider)
    ):
        raise TypeError(
            "Provider class must inherit from BaseVCSProvider, "
            f"got {provider_class!r}"
        )

    _PROVIDERS[platform.lower()] = provider_class


def list_supported_platforms() -> list[str]:
    return sorted(_PROVIDERS.keys())
