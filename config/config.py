import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv(".env")

class Config:
    """Configuration class for the Azure DevOps issue counter."""

    # Azure DevOps settings
    AZURE_DEVOPS_ORG = os.getenv("AZURE_DEVOPS_ORG", "")
    AZURE_DEVOPS_PAT = os.getenv("AZURE_DEVOPS_PAT", "")
    AZURE_DEVOPS_PROJECT = os.getenv("AZURE_DEVOPS_PROJECT", "")

    # On-premises collection URL (e.g. https://tfs.example.com/tfs/DefaultCollection)
    AZURE_DEVOPS_SERVER_URL = os.getenv("AZURE_DEVOPS_SERVER_URL", "")

    # Seconds to wait for a single HTTP call
    REQUEST_TIMEOUT = float(os.getenv("AZURE_DEVOPS_TIMEOUT", "60"))

    LOG_LEVEL = os.getenv("ISSUE_COUNTER_LOG_LEVEL", "WARNING")

    # API versions
    API_VERSION = {
        "work_items": "7.1",
        "wiql": "7.0"
    }

    # Default query vocabulary
    DEFAULT_CLOSED_STATES = ["Done", "Closed"]
    DEFAULT_WORK_ITEM_KINDS = ["Product Backlog Item", "Bug"]
    DEFAULT_EXCLUDED_STATES = ["Removed"]
    TRACKED_STATE_FIELD = "System.State"

    # Report rendering
    DEFAULT_DATE_FORMAT = "%m/%d/%Y"
    DEFAULT_TIMEZONE = "UTC"
    WIQL_DATE_FORMAT = "%Y-%m-%d"

    @classmethod
    def get_api_version(cls, service):
        """Get the API version for a specific service."""
        return cls.API_VERSION.get(service, "7.0")


class ConnectionSettings:
    """Everything needed to reach one Azure DevOps project."""

    def __init__(self, organization="", personal_access_token="", project="",
                 server_url=None, timeout=60.0):
        self.organization = organization
        self.personal_access_token = personal_access_token
        self.project = project
        self.on_premises = bool(server_url)
        self.server_url = (server_url or f"https://dev.azure.com/{organization}").rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_config(cls, organization=None, personal_access_token=None, project=None,
                    server_url=None, timeout=None):
        """
        Build settings from explicit values, falling back to the environment.

        Args:
            organization: Azure DevOps organization name
            personal_access_token: Personal access token
            project: Project name
            server_url: Collection URL for Azure DevOps Server
            timeout: Request timeout in seconds

        Returns:
            ConnectionSettings
        """
        organization = organization or Config.AZURE_DEVOPS_ORG
        return cls(
            organization=organization,
            personal_access_token=personal_access_token or Config.AZURE_DEVOPS_PAT,
            project=project or Config.AZURE_DEVOPS_PROJECT,
            server_url=server_url or Config.AZURE_DEVOPS_SERVER_URL or None,
            timeout=timeout if timeout is not None else Config.REQUEST_TIMEOUT
        )

    def validate(self):
        """Raise ValueError when a required setting is missing."""
        if not self.organization and not self.on_premises:
            raise ValueError("Azure DevOps organization is required. Provide it via --organization or set AZURE_DEVOPS_ORG.")
        if not self.personal_access_token:
            raise ValueError("Azure DevOps personal access token is required. Provide it via --personal-access-token or set AZURE_DEVOPS_PAT.")
        if not self.project:
            raise ValueError("Azure DevOps project is required. Provide it via --project or set AZURE_DEVOPS_PROJECT.")

    def __repr__(self):
        return f"ConnectionSettings(server_url='{self.server_url}', project='{self.project}')"
