from typing import Dict

from .aws import AWSProvider
from .azure import AzureProvider
from .common import CloudProvider, RolloutStep, url_suffix, validate_common_options
from .gcp import GCPProvider
from .heroku import HerokuProvider
from .netlify import NetlifyProvider
from .vercel import VercelProvider


def build_provider_registry() -> Dict[str, CloudProvider]:
    """One provider per supported platform, keyed by platform name"""
    providers = [
        VercelProvider(),
        NetlifyProvider(),
        HerokuProvider(),
        AWSProvider(),
        GCPProvider(),
        AzureProvider(),
    ]
    return {provider.platform: provider for provider in providers}


__all__ = [
    "AWSProvider",
    "AzureProvider",
    "CloudProvider",
    "GCPProvider",
    "HerokuProvider",
    "NetlifyProvider",
    "RolloutStep",
    "VercelProvider",
    "build_provider_registry",
    "url_suffix",
    "validate_common_options",
]
