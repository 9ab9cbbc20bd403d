import logging
from datetime import date
from typing import Dict, Iterable, List, Optional
from urllib.parse import quote

from azure.devops.connection import Connection
from azure.devops.exceptions import AzureDevOpsServiceError
from msrest.authentication import BasicAuthentication
from msrest.exceptions import ClientException

from classes.AzureDevOps import AzureDevOps, WorkItemFetchError
from classes.work_item_models import Revision, WorkItem, parse_timestamp
from config.config import Config, ConnectionSettings


logger = logging.getLogger(__name__)

# Azure DevOps API allows a max of 200 IDs per request
DETAILS_BATCH_SIZE = 200
REVISIONS_PAGE_SIZE = 200

WORK_ITEM_FIELDS = [
    "System.Id",
    "System.State",
    "System.CreatedDate"
]


class AzureDevOpsWorkItemSource(AzureDevOps):
    """
    Reads work items and their revision logs from one Azure DevOps project.
    """

    def __init__(self, settings: ConnectionSettings):
        super().__init__(settings)
        self.project_name = settings.project
        self.project_id = None
        self.connected = False

    def connect(self) -> bool:
        """
        Resolve the configured project through the Azure DevOps SDK.

        Returns:
            True if the project exists, False if the server reports it does not

        Raises:
            WorkItemFetchError: If the server cannot be reached or rejects the credentials
                or the lookup fails for any other reason
        """
        credentials = BasicAuthentication('', self.pat)
        connection = Connection(base_url=self.settings.server_url, creds=credentials)

        try:
            core_client = connection.clients.get_core_client()
            project = core_client.get_project(self.project_name)
        except AzureDevOpsServiceError as err:
            if "ProjectDoesNotExist" not in (getattr(err, "type_key", None) or ""):
                raise WorkItemFetchError(f"Could not resolve project {self.project_name}: {err}") from err
            logger.error("Project %s does not exist: %s", self.project_name, err)
            project = None
        except ClientException as err:
            raise WorkItemFetchError(f"Could not connect to {self.settings.server_url}: {err}") from err

        if project is not None:
            self.project_id = project.id
            self.project_name = project.name
            print(f"Connected to Azure DevOps Project: {project.name}")

        self.connected = project is not None
        return self.connected

    @staticmethod
    def format_clause(values: Iterable[str]) -> str:
        """Render values as a WIQL list literal, e.g. ('Done', 'Closed')."""
        quoted = ["'" + str(value).replace("'", "''") + "'" for value in values]
        return f"({', '.join(quoted)})"

    def _project_segment(self) -> str:
        if self.project_id:
            return self.project_id
        return quote(self.project_name.strip(), safe='')

    def build_wiql_query(self, excluded_states: Iterable[str], work_item_kinds: Iterable[str],
                         created_date: date, created_operator: str) -> str:
        """
        Build a WIQL query over the project.

        Args:
            excluded_states: States to leave out
            work_item_kinds: Work item types to include
            created_date: Date the creation date is compared against
            created_operator: Comparison applied to System.CreatedDate

        Returns:
            str: WIQL query string
        """
        conditions = [
            "[System.TeamProject] = @project",
            f"[System.State] NOT IN {self.format_clause(excluded_states)}",
            f"[System.WorkItemType] IN {self.format_clause(work_item_kinds)}",
            f"[System.CreatedDate] {created_operator} '{created_date.strftime(Config.WIQL_DATE_FORMAT)}'"
        ]
        query = "SELECT [System.Id], [System.CreatedDate], [System.State] FROM WorkItems WHERE "
        query += " AND ".join(conditions)
        query += " ORDER BY [System.Id]"
        return query

    def execute_wiql_query(self, query: str) -> List[int]:
        """
        Execute a WIQL query and return work item IDs.

        Args:
            query: WIQL query string

        Returns:
            List of work item IDs
        """
        logger.debug("Executing WIQL query: %s", query)
        endpoint = f"{self._project_segment()}/_apis/wit/wiql?api-version={self.get_api_version('wiql')}"
        response = self.handle_request("POST", endpoint, {"query": query})
        return [wi["id"] for wi in response.get("workItems", [])]

    def query_open_count_at(self, count_date: date, closed_states: Iterable[str],
                            work_item_kinds: Iterable[str]) -> int:
        """
        Count the items created on or before a date that are not in a closed state now.

        Args:
            count_date: Day to count at
            closed_states: States that mean "done"
            work_item_kinds: Work item types to count

        Returns:
            Number of matching work items
        """
        query = self.build_wiql_query(closed_states, work_item_kinds, count_date, "<=")
        count = len(self.execute_wiql_query(query))
        print(f"Total Number of Open Items on {count_date.strftime('%d-%b-%Y')} = {count}")
        return count

    def query_items_created_after(self, start_date: date, excluded_states: Iterable[str],
                                  work_item_kinds: Iterable[str]) -> List[WorkItem]:
        """
        Fetch every item created after a date, with its revision log.

        Args:
            start_date: Items created after this day are returned
            excluded_states: States whose items are skipped
            work_item_kinds: Work item types to fetch

        Returns:
            List of WorkItem
        """
        query = self.build_wiql_query(excluded_states, work_item_kinds, start_date, ">")
        work_item_ids = self.execute_wiql_query(query)
        logger.info("Found %d work items created after %s", len(work_item_ids), start_date)

        work_items = []
        for i in range(0, len(work_item_ids), DETAILS_BATCH_SIZE):
            ids_chunk = work_item_ids[i:i + DETAILS_BATCH_SIZE]
            for details in self.get_work_item_details(ids_chunk):
                work_items.append(self._to_work_item(details, self.get_work_item_revisions(details["id"])))
        return work_items

    def get_item(self, work_item_id: int) -> WorkItem:
        """Fetch one work item with its revision log."""
        endpoint = (f"{self._project_segment()}/_apis/wit/workitems/{work_item_id}"
                    f"?api-version={self.get_api_version('work_items')}")
        details = self.handle_request("GET", endpoint)
        return self._to_work_item(details, self.get_work_item_revisions(work_item_id))

    def get_work_item_details(self, work_item_ids: List[int]) -> List[Dict]:
        """
        Get the raw field data for up to 200 work items.

        Args:
            work_item_ids: List of work item IDs

        Returns:
            List of work item payloads
        """
        if not work_item_ids:
            return []
        ids_str = ",".join(map(str, work_item_ids))
        fields_str = ",".join(WORK_ITEM_FIELDS)
        endpoint = (f"{self._project_segment()}/_apis/wit/workitems?ids={ids_str}&fields={fields_str}"
                    f"&api-version={self.get_api_version('work_items')}")
        response = self.handle_request("GET", endpoint)
        return response.get("value", [])

    def get_work_item_revisions(self, work_item_id: int) -> List[Revision]:
        """
        Get revision history for a work item, oldest first.

        Each revision carries the field values of the revision before it, so
        changes can be detected without another request.

        Args:
            work_item_id: Work item ID

        Returns:
            List of Revision
        """
        raw_revisions = []
        skip = 0
        while True:
            endpoint = (f"{self._project_segment()}/_apis/wit/workitems/{work_item_id}/revisions"
                        f"?$top={REVISIONS_PAGE_SIZE}&$skip={skip}"
                        f"&api-version={self.get_api_version('work_items')}")
            page = self.handle_request("GET", endpoint).get("value", [])
            raw_revisions.extend(page)
            if len(page) < REVISIONS_PAGE_SIZE:
                break
            skip += REVISIONS_PAGE_SIZE

        revisions = []
        previous_fields: Optional[Dict] = None
        for raw in raw_revisions:
            fields = raw.get("fields", {})
            revisions.append(Revision(
                number=raw.get("rev", 0),
                changed_at=parse_timestamp(fields.get("System.ChangedDate", "")),
                fields=fields,
                original_fields=previous_fields
            ))
            previous_fields = fields
        return revisions

    @staticmethod
    def _to_work_item(details: Dict, revisions: List[Revision]) -> WorkItem:
        fields = details.get("fields", {})
        return WorkItem(
            id=details["id"],
            created_at=parse_timestamp(fields.get("System.CreatedDate", "")),
            state=fields.get("System.State", ""),
            revisions=revisions
        )
