class ClusterConnectionError(Exception):
    """
    Exception raised when credentials cannot be loaded or the API server
    cannot be reached.
    """
    pass

class ListingError(Exception):
    """
    Exception raised when listing nodes, namespaces or pods fails.
    """
    pass

class DimensionMismatchError(Exception):
    pass
