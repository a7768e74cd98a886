"""Store encoding and bulk-load output.

This package encodes vertices into row-keyed mutations and persists
sorted, partitioned bulk-load files for the key-value store.
"""
