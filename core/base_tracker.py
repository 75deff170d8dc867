"""
Base tracker class for the WinBuilds tracker system.
Defines the interface all tracker plugins must implement.
"""

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)

class BaseTracker(ABC):
    """
    Base class for all tracker plugins.

    Each tracker must implement scrape() and report().
    """

    def __init__(self, name, config):
        """
        Initialize the tracker.

        Args:
            name (str): Tracker name (e.g., 'windows_builds')
            config (dict): Tracker-specific configuration
        """
        self.name = name
        self.config = config
        self.display_name = config.get('display_name', name.replace('_', ' ').title())
        self.logger = logging.getLogger(f"winbuilds.{name}")

    @abstractmethod
    def scrape(self):
        """
        Collect and classify records from the configured sources.

        Returns:
            int: Number of records collected
        """
        pass

    @abstractmethod
    def report(self, export_dir):
        """
        Write the collected records out.

        Args:
            export_dir (str): Directory that receives the export files

        Returns:
            list: Paths of the files written
        """
        pass
