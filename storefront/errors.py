class StorefrontError(Exception):
    pass


class ServiceUnavailable(StorefrontError):
    """A catalog or recommendation service call failed (transport error or HTTP >= 400)."""

    retryable = False

    def __init__(self, service: str, message: str, status: int | None = None):
        super().__init__(f"{service}: {message}")
        self.service = service
        self.status = status


class CatalogUnavailable(ServiceUnavailable):
    # nothing to fall back to when the catalog itself is missing
    retryable = True

    def __init__(self, message: str, status: int | None = None):
        super().__init__("catalog", message, status)
