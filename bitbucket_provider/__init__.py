from __future__ import annotations

from bitbucket_provider.provider import PROVIDER_SCHEMA, BitbucketProvider

__version__ = "0.1.0"

__all__ = ["BitbucketProvider", "PROVIDER_SCHEMA", "__version__"]
