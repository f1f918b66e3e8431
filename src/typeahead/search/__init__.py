"""Remote product search: HTTP client, response schemas and caching executor."""

from .client import ProductSearchClient
from .executor import CachingPageExecutor, PageExecutor

__all__ = ["CachingPageExecutor", "PageExecutor", "ProductSearchClient"]
