"""
Update-history correlation for Windows builds.

The vendor's "update history" pages list every KB announcement as a link
whose text (and URL slug) says whether the update was a preview or an
out-of-band release. The index built here lets the classifier find the
announcement for a KB article by substring match.
"""

import logging
import time
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

class UpdateHistoryIndex:
    """Ordered, read-only collection of announcement-link markup"""

    def __init__(self, entries):
        """
        Args:
            entries (list): (page_url, link_markup) tuples in page order, then document order
        """
        self._entries = tuple(entries)

    def __len__(self):
        return len(self._entries)

    @classmethod
    def from_pages(cls, pages):
        """
        Build the index from already fetched pages.

        Args:
            pages (list): (url, html) tuples in lookup priority order

        Returns:
            UpdateHistoryIndex: The index
        """
        entries = []
        for url, html in pages:
            soup = BeautifulSoup(html, 'html.parser')
            links = soup.find_all('a')
            entries.extend((url, str(link)) for link in links)
            logger.debug(f"Indexed {len(links)} links from {url}")

        return cls(entries)

    @classmethod
    def build(cls, urls, scraper, delay_seconds=1.0):
        """
        Fetch every update-history page and index its links.

        A failed fetch aborts the whole build; no partial index is returned.

        Args:
            urls (list): Update-history page URLs
            scraper (ReleaseInfoScraper): Scraper used for the blocking fetches
            delay_seconds (float): Pause between consecutive fetches

        Returns:
            UpdateHistoryIndex: The index

        Raises:
            FetchError: If any page cannot be fetched
        """
        pages = []
        for position, url in enumerate(urls):
            if position and delay_seconds:
                # Be nice to the servers
                time.sleep(delay_seconds)

            logger.info(f"Fetching update history: {url}")
            pages.append((url, scraper.fetch_page(url)))

        index = cls.from_pages(pages)
        logger.info(f"Update history index built from {len(pages)} pages ({len(index)} links)")
        return index

    def lookup(self, kb_article):
        """
        Find the first announcement link mentioning a KB article.

        Args:
            kb_article (str): KB identifier, e.g. 'KB5034123'

        Returns:
            str: Raw link markup, or None when no page mentions the KB

        Raises:
            TypeError: If kb_article is not a string
        """
        if not isinstance(kb_article, str):
            raise TypeError(f"KB article must be a string, got {type(kb_article).__name__}")

        for _, markup in self._entries:
            if kb_article in markup:
                return markup
        return None
