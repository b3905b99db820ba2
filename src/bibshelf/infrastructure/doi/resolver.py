from __future__ import annotations

import logging

import httpx

from bibshelf.core.config import DEFAULT_DOI_URL, DEFAULT_USER_AGENT
from bibshelf.core.errors import ResolutionError
from bibshelf.domain.models.entry import Entry
from bibshelf.infrastructure.importers.bibtex_importer import parse_entry

logger = logging.getLogger(__name__)

BIBTEX_MEDIA_TYPE = "application/x-bibtex"


class DoiResolver:
    """Fetch BibTeX for a DOI from a resolver service and parse it.

    A single request is made per call. Transport failures, timeouts and
    non-2xx answers raise ``ResolutionError``; malformed BibTeX raises
    ``ParseError`` from the parser.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_DOI_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self._owns_client = client is None
        self.client = client or httpx.Client(
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
        )

    def __enter__(self) -> DoiResolver:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def fetch_bibtex(self, doi: str) -> str:
        identifier = doi.strip()
        if not identifier:
            raise ResolutionError("DOI must not be empty")

        url = f"{self.base_url}/{identifier}"
        headers = {"Accept": BIBTEX_MEDIA_TYPE, "User-Agent": self.user_agent}
        logger.info("Resolving %s", url)
        try:
            response = self.client.get(url, headers=headers)
            response.raise_for_status()
            return response.content.decode(response.encoding or "utf-8")
        except httpx.HTTPStatusError as exc:
            raise ResolutionError(
                f"DOI service answered {exc.response.status_code} for {identifier}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ResolutionError(f"Could not reach DOI service for {identifier}: {exc}") from exc
        except (UnicodeDecodeError, LookupError) as exc:
            raise ResolutionError(f"DOI service returned an undecodable body for {identifier}") from exc

    def resolve(self, doi: str) -> Entry:
        raw = self.fetch_bibtex(doi)
        logger.debug("Received BibTeX for %s:\n%s", doi, raw)
        return parse_entry(raw)
