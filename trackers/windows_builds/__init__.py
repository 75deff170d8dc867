"""
Windows builds tracker plugin for WinBuilds.
Tracks the build tables on the Windows 10, Windows 11 and Windows Server
release-information pages.
"""

import os
import logging

from core.base_tracker import BaseTracker
from core.config import load_tracker_config
from .assembler import assemble
from .classifier import classify_rows, DEFAULT_MAX_WORKERS
from .exporter import export_product
from .models import ClassificationContext
from .overrides import load_overrides, reconcile
from .scraper import ReleaseInfoScraper
from .update_history import UpdateHistoryIndex

logger = logging.getLogger(__name__)

REPO_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

class WindowsBuildsTracker(BaseTracker):
    """Tracker for Windows build releases"""

    def __init__(self, config, products=None, scraper=None, base_dir=REPO_ROOT):
        """
        Initialize the tracker.

        Args:
            config (dict): Settings from the root config's trackers.windows_builds block
            products (list, optional): Product definitions; read from the tracker config.yaml otherwise
            scraper (ReleaseInfoScraper, optional): Scraper to fetch pages with
            base_dir (str): Directory relative override paths are resolved against
        """
        super().__init__('windows_builds', config)

        if products is None:
            products = load_tracker_config(os.path.dirname(__file__)).get('products', [])
        self.products = {product['key']: product for product in products}

        self.scraper = scraper or ReleaseInfoScraper(
            timeout=self.config.get('request_timeout', 30),
            user_agent=self.config.get('user_agent'),
        )
        self.base_dir = base_dir
        self.max_workers = self.config.get('max_workers', DEFAULT_MAX_WORKERS)
        self.request_delay = self.config.get('request_delay_seconds', 1)

        # product key -> ordered records from the last scrape()
        self.results = {}

    def get_product(self, product_key):
        """Return a product definition, raising KeyError for unknown keys."""
        try:
            return self.products[product_key]
        except KeyError:
            raise KeyError(f"Unknown product: {product_key}") from None

    def _overrides_path(self, product):
        path = product.get('overrides')
        if not path or os.path.isabs(path):
            return path
        return os.path.join(self.base_dir, path)

    def collect(self, product_key, build_filter=None, include_preview=None,
                include_out_of_band=None, newest_only=False):
        """
        Run the full pipeline for one product.

        Args:
            product_key (str): 'windows10', 'windows11' or 'windowsserver'
            build_filter (int, optional): Only keep builds with this major
            include_preview (bool, optional): Keep preview releases; config default otherwise
            include_out_of_band (bool, optional): Keep out-of-band releases; config default otherwise
            newest_only (bool): Keep only the newest record

        Returns:
            list: Ordered BuildRecord objects

        Raises:
            FetchError: If any page cannot be fetched
            ClassificationError: If an update-history lookup fails
            OverrideConflictError: If the override dataset is ambiguous
        """
        product = self.get_product(product_key)

        if include_preview is None:
            include_preview = self.config.get('include_preview', False)
        if include_out_of_band is None:
            include_out_of_band = self.config.get('include_out_of_band', False)

        self.logger.info(f"Collecting {product['name']} builds from {product['release_info_url']}")
        html = self.scraper.fetch_page(product['release_info_url'])
        rows = list(self.scraper.extract_rows(
            html,
            product.get('extraction', 'table'),
            table_class=product.get('table_class'),
        ))
        self.logger.info(f"Extracted {len(rows)} rows for {product['name']}")

        history_index = UpdateHistoryIndex.build(
            product.get('update_history_urls', []),
            self.scraper,
            delay_seconds=self.request_delay,
        )

        context = ClassificationContext(
            product_key=product_key,
            product_name=product['name'],
            server_family=bool(product.get('server_family')),
            history_index=history_index,
            build_filter=build_filter,
            include_preview=include_preview,
            include_out_of_band=include_out_of_band,
            delimiter=product.get('delimiter', '•'),
        )
        records = classify_rows(rows, context, max_workers=self.max_workers)

        overrides = load_overrides(self._overrides_path(product))
        records = reconcile(records, overrides)

        return assemble(records, newest_only=newest_only)

    def scrape(self, product_keys=None, **options):
        """
        Collect every selected product.

        A failure in any product propagates; products already collected stay
        in self.results but nothing is exported by this call.

        Args:
            product_keys (list, optional): Products to collect; all configured products otherwise
            **options: Passed through to collect()

        Returns:
            int: Total number of records collected
        """
        self.logger.info("=" * 70)
        self.logger.info("Starting Windows build collection")
        self.logger.info("=" * 70)

        total = 0
        for product_key in product_keys or list(self.products):
            records = self.collect(product_key, **options)
            self.results[product_key] = records
            self.logger.info(f"Collected {len(records)} {self.products[product_key]['name']} builds")
            total += len(records)

        self.logger.info(f"Collection completed - Total builds: {total}")
        return total

    def report(self, export_dir):
        """
        Write JSON exports for every product collected by scrape().

        Args:
            export_dir (str): Directory that receives the export files

        Returns:
            list: Paths of the files written
        """
        paths = []
        for product_key, records in self.results.items():
            paths.extend(export_product(self.products[product_key]['slug'], records, export_dir))

        self.logger.info(f"Export completed - {len(paths)} files written to {export_dir}")
        return paths
