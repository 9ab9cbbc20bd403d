import base64
import logging

import requests

from config.config import Config, ConnectionSettings


logger = logging.getLogger(__name__)


class WorkItemFetchError(Exception):
    """Raised when Azure DevOps cannot be reached or returns an unusable response."""


class AzureDevOps:
    """
    A wrapper class for handling Azure DevOps credentials and common functions.
    """
    def __init__(self, settings: ConnectionSettings):
        settings.validate()
        self.settings = settings
        self.organization = settings.organization
        self.pat = settings.personal_access_token
        self.encoded_pat = base64.b64encode(f":{self.pat}".encode()).decode()
        self.base_url = f"{settings.server_url}/"

    def handle_request(self, method, endpoint, data=None):
        """
        Handles HTTP requests with error handling.

        Args:
            method (str): HTTP method (GET, POST)
            endpoint (str): API endpoint
            data (dict): Request data for POST methods

        Returns:
            dict: Response data

        Raises:
            WorkItemFetchError: If the request fails or the response is not valid JSON
        """
        url = f"{self.base_url}{endpoint}"
        headers = {
            "Authorization": f"Basic {self.encoded_pat}",
            "Content-Type": "application/json"
        }

        logger.debug("Sending %s request to: %s", method, url)
        try:
            response = requests.request(method, url, headers=headers, json=data,
                                        timeout=self.settings.timeout)
            response.raise_for_status()
        except requests.exceptions.HTTPError as http_err:
            logger.error("HTTP error occurred: %s", http_err)
            logger.debug("Response content: %s", http_err.response.content if http_err.response is not None else b"")
            raise WorkItemFetchError(f"HTTP error occurred: {http_err}") from http_err
        except requests.exceptions.RequestException as err:
            logger.error("Request to %s failed: %s", url, err)
            raise WorkItemFetchError(f"Request to {url} failed: {err}") from err

        # Handle empty responses
        if not response.content:
            return {}

        try:
            return response.json()
        except ValueError as json_err:
            logger.error("Invalid JSON response: %s", json_err)
            raise WorkItemFetchError(f"Invalid JSON response from {url}") from json_err

    def get_api_version(self, service):
        """Get the API version for a specific service."""
        return Config.get_api_version(service)
