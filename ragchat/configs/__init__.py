"""
Typed configuration read from environment variables and ``.env``.

Sections use their own prefix: ``LLM_``, ``VECTOR_STORE_``, ``INGESTION_``
and ``API_``. Runtime flags (``ENVIRONMENT``, ``DEBUG``, ``LOG_LEVEL``) are
unprefixed.
"""

from ragchat.configs.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
