"""Read-only data sources."""

from keyward.data_sources.provider import ProviderDataSource

__all__ = ["ProviderDataSource"]
