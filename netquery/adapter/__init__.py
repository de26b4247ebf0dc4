"""
Adapters over third-party SDKs.

Imported lazily by netquery.common.envector_client so that pyenvector is only
loaded when a live connection is opened.
"""
