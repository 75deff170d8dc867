"""
Configuration loader module for WinBuilds.
Handles loading of the root YAML configuration and tracker source files.
"""

import yaml
import os
import logging

logger = logging.getLogger(__name__)

def load_config(config_path):
    """
    Load configuration from a YAML file.

    Args:
        config_path (str): Path to the YAML configuration file

    Returns:
        dict: Configuration dictionary

    Raises:
        FileNotFoundError: If configuration file doesn't exist
        yaml.YAMLError: If configuration file is invalid YAML
    """
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f) or {}

        logger.info(f"Successfully loaded configuration from {config_path}")
        return config

    except yaml.YAMLError as e:
        logger.error(f"Error parsing YAML configuration: {str(e)}")
        raise


def load_tracker_config(tracker_dir):
    """
    Load the tracker-specific config.yaml that sits next to a tracker package.

    Args:
        tracker_dir (str): Directory of the tracker package

    Returns:
        dict: Tracker configuration (products, sources)
    """
    return load_config(os.path.join(tracker_dir, 'config.yaml'))


def get_tracker_settings(config, tracker_name):
    """
    Return the settings block for one tracker from the root configuration.

    Missing blocks yield an empty dict so trackers fall back to their defaults.
    """
    trackers = config.get('trackers') or {}
    return dict(trackers.get(tracker_name) or {})
