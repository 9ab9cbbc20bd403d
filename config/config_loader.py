"""
Configuration loader for the Azure DevOps issue counter.
Handles loading and validation of JSON configuration files.
"""

import json
import logging
import os
from typing import Dict, List, Any

import pytz

from .config import Config


logger = logging.getLogger(__name__)


class ConfigLoader:
    """Loads and validates issue counter configuration."""

    def __init__(self, config_file_path: str = None):
        """
        Initialize configuration loader.

        Args:
            config_file_path: Path to the JSON configuration file
        """
        # Set default config file path relative to this file
        if config_file_path is None:
            config_file_path = os.path.join(os.path.dirname(__file__), "issue_counter_config.json")
        self.config_file_path = config_file_path
        self.config = {}
        self.load_config()

    def load_config(self) -> Dict[str, Any]:
        """Load configuration from JSON file."""
        if not os.path.exists(self.config_file_path):
            logger.info("Configuration file %s not found. Using defaults.", self.config_file_path)
            self.config = self._get_default_config()
            return self.config

        try:
            with open(self.config_file_path, 'r', encoding='utf-8') as f:
                self.config = json.load(f)
            logger.info("Loaded configuration from %s", self.config_file_path)
            self._validate_config()
            return self.config
        except json.JSONDecodeError as e:
            logger.warning("Error loading config file: %s. Using defaults.", e)
            self.config = self._get_default_config()
            return self.config

    def _validate_config(self):
        """Validate loaded configuration and add defaults for missing keys."""
        default_config = self._get_default_config()

        # Ensure all required sections exist
        for section_key, section_value in default_config.items():
            if section_key not in self.config:
                self.config[section_key] = section_value
                logger.debug("Added missing config section: %s", section_key)
            elif isinstance(section_value, dict):
                for key, value in section_value.items():
                    if key not in self.config[section_key]:
                        self.config[section_key][key] = value
                        logger.debug("Added missing config key: %s.%s", section_key, key)

    def _get_default_config(self) -> Dict[str, Any]:
        """Return default configuration."""
        return {
            "work_item_query": {
                "work_item_kinds": list(Config.DEFAULT_WORK_ITEM_KINDS),
                "excluded_states": list(Config.DEFAULT_EXCLUDED_STATES)
            },
            "state_categories": {
                "closed_states": list(Config.DEFAULT_CLOSED_STATES),
                "tracked_field": Config.TRACKED_STATE_FIELD
            },
            "report": {
                "date_format": Config.DEFAULT_DATE_FORMAT,
                "timezone": Config.DEFAULT_TIMEZONE,
                "output_file": ""
            }
        }

    def get_work_item_kinds(self) -> List[str]:
        """Get list of work item types to count."""
        return self.config.get("work_item_query", {}).get("work_item_kinds", [])

    def get_excluded_states(self) -> List[str]:
        """Get states whose items are never fetched."""
        return self.config.get("work_item_query", {}).get("excluded_states", [])

    def get_closed_states(self) -> List[str]:
        """Get states that indicate an item is done."""
        return self.config.get("state_categories", {}).get("closed_states", [])

    def get_tracked_field(self) -> str:
        return self.config.get("state_categories", {}).get("tracked_field", Config.TRACKED_STATE_FIELD)

    def get_date_format(self) -> str:
        return self.config.get("report", {}).get("date_format", Config.DEFAULT_DATE_FORMAT)

    def get_timezone(self) -> str:
        return self.config.get("report", {}).get("timezone", Config.DEFAULT_TIMEZONE)

    def get_output_file(self) -> str:
        return self.config.get("report", {}).get("output_file", "") or ""

    def validate_for_stats(self) -> None:
        """
        Check the settings the statistics command cannot run without.

        Raises:
            ValueError: If no closed states or no work item kinds are configured
        """
        if not self.get_closed_states():
            raise ValueError("At least one closed state is required. Provide it via --closed-states.")
        if not self.get_work_item_kinds():
            raise ValueError("At least one work item kind is required. Provide it via --work-item-kinds.")

    def validate_timezone(self) -> None:
        """Raise ValueError when the configured timezone is not a known tz database name."""
        timezone = self.get_timezone()
        try:
            pytz.timezone(timezone)
        except pytz.exceptions.UnknownTimeZoneError as err:
            raise ValueError(f"Unknown timezone '{timezone}'. Use a tz database name such as UTC or Europe/Berlin.") from err

    def update_config_from_cli_args(self, args) -> None:
        """
        Update configuration with command line arguments.

        Args:
            args: Parsed command line arguments
        """
        if getattr(args, 'closed_states', None):
            closed_states = [s.strip() for s in args.closed_states.split(',') if s.strip()]
            self.config.setdefault("state_categories", {})["closed_states"] = closed_states

        if getattr(args, 'work_item_kinds', None):
            kinds = [k.strip() for k in args.work_item_kinds.split(',') if k.strip()]
            self.config.setdefault("work_item_query", {})["work_item_kinds"] = kinds

        if getattr(args, 'excluded_states', None):
            excluded = [s.strip() for s in args.excluded_states.split(',') if s.strip()]
            self.config.setdefault("work_item_query", {})["excluded_states"] = excluded

        if getattr(args, 'date_format', None):
            self.config.setdefault("report", {})["date_format"] = args.date_format

        if getattr(args, 'timezone', None):
            self.config.setdefault("report", {})["timezone"] = args.timezone

        if getattr(args, 'output_file', None):
            self.config.setdefault("report", {})["output_file"] = args.output_file.strip()
