from .path_store import PathStore, PathStoreError
