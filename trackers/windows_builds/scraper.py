"""
Scraper module for the Windows release-information pages.
Fetches a release-information page and extracts one raw row per build.
"""

import logging
import random
import requests
from bs4 import BeautifulSoup

from core.errors import FetchError
from .models import RawRow

logger = logging.getLogger(__name__)

EXTRACTION_ROWS = 'rows'
EXTRACTION_TABLE = 'table'

DEFAULT_TABLE_CLASS = 'cells-centered'

class ReleaseInfoScraper:
    """Fetches release-information pages and turns their build tables into raw rows"""

    USER_AGENTS = [
        'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36',
        'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/15.0 Safari/605.1.15',
        'Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:90.0) Gecko/20100101 Firefox/90.0',
    ]

    def __init__(self, session=None, timeout=30, user_agent=None):
        """
        Initialize the scraper.

        Args:
            session (requests.Session, optional): Session to issue requests with
            timeout (int): Per-request timeout in seconds
            user_agent (str, optional): Fixed User-Agent; a random one is used otherwise
        """
        self.session = session or requests.Session()
        self.timeout = timeout
        self.user_agent = user_agent

    def get_user_agent(self):
        """Get the configured user agent, or a random one."""
        return self.user_agent or random.choice(self.USER_AGENTS)

    def fetch_page(self, url):
        """
        Fetch a page once. There is no retry.

        Args:
            url (str): URL to request

        Returns:
            str: Page markup

        Raises:
            FetchError: On any request failure or HTTP error status
        """
        headers = {'User-Agent': self.get_user_agent()}

        try:
            response = self.session.get(url, headers=headers, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Request error for {url}: {str(e)}")
            raise FetchError(url, str(e)) from e

        logger.debug(f"Fetched {url} ({len(response.text)} characters)")
        return response.text

    def extract_rows(self, html, strategy, table_class=DEFAULT_TABLE_CLASS):
        """
        Extract raw build rows from release-information markup.

        Args:
            html (str): Page markup
            strategy (str): 'rows' scans every 4-cell row in the document,
                'table' reads 5-column tables carrying ``table_class``
            table_class (str): Class marker of the build tables ('table' only)

        Returns:
            generator: RawRow per well-formed row

        Raises:
            ValueError: If the strategy is unknown
        """
        if strategy == EXTRACTION_ROWS:
            return self._extract_document_rows(html)
        if strategy == EXTRACTION_TABLE:
            return self._extract_table_rows(html, table_class or DEFAULT_TABLE_CLASS)
        raise ValueError(f"Unsupported extraction strategy: {strategy}")

    def _extract_document_rows(self, html):
        soup = BeautifulSoup(html, 'html.parser')

        for tr in soup.find_all('tr'):
            cells = tr.find_all('td', recursive=False)
            if len(cells) != 4:
                continue

            row = self._build_row(cells[0], cells[1], cells[2], cells[3])
            if row:
                yield row

    def _extract_table_rows(self, html, table_class):
        soup = BeautifulSoup(html, 'html.parser')
        tables = soup.find_all('table', class_=table_class)
        logger.debug(f"Found {len(tables)} '{table_class}' tables")

        for table in tables:
            for index, tr in enumerate(table.find_all('tr')):
                # Header row
                if index == 0 or tr.find('th'):
                    continue

                cells = tr.find_all('td', recursive=False)
                if len(cells) != 5:
                    logger.debug(f"Skipping row with {len(cells)} cells")
                    continue

                # cells[1] is the update-type column, which is not used
                row = self._build_row(cells[0], cells[2], cells[3], cells[4])
                if row:
                    yield row

    def _build_row(self, servicing_cell, date_cell, build_cell, link_cell):
        link = link_cell.find('a')
        if link is None:
            logger.debug(f"Skipping row without KB link: {build_cell.get_text(strip=True)}")
            return None

        return RawRow(
            servicing_option_text=self._cell_text(servicing_cell),
            availability_date_text=self._cell_text(date_cell),
            build_version_text=self._cell_text(build_cell),
            kb_url=(link.get('href') or '').strip(),
            kb_article_id=link.get_text(strip=True),
        )

    @staticmethod
    def _cell_text(cell):
        return ' '.join(cell.get_text(separator=' ').split())
