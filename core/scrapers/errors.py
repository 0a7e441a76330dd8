from typing import Optional


class ScraperError(Exception):
    """Base class for scraper exceptions."""
    pass


class FetchError(ScraperError):
    """Raised when a URL could not be fetched after all retry attempts.

    Attributes:
        url: The URL that was requested
        last_status: HTTP status of the last response, or None when no
                     response was received (timeout, connection error)
        last_message: Message of the last underlying error
    """

    def __init__(self, url: str, last_status: Optional[int], last_message: str):
        self.url = url
        self.last_status = last_status
        self.last_message = last_message
        status = last_status if last_status is not None else "no response"
        super().__init__(f"Failed to fetch {url} ({status}): {last_message}")


class ExtractionError(ScraperError):
    """Raised when a listing item lacks the fields a product requires."""
    pass
