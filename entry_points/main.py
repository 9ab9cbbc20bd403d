import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

# Add the parent directory to Python path to access classes and config
sys.path.append(str(Path(__file__).parent.parent))

from classes.AzureDevOps import WorkItemFetchError
from classes.WorkItemSource import AzureDevOpsWorkItemSource
from classes.commands import IssueCounterCommands
from config.config import Config, ConnectionSettings
from config.config_loader import ConfigLoader


def explain_commands():
    """
    Explains all available commands and their arguments.
    """
    explanation = """
Azure DevOps Issue Counter:

Commands:
  --stats
      Produce stats on what issues were opened or closed, one line per day:
        date,opened,closed,open total
      Required arguments:
        --closed-states   : Comma-separated states that mean an issue is resolved.
        --work-item-kinds : Comma-separated work item types to count.
        --start-date      : Earliest date to process (YYYY-MM-DD).
      Optional arguments:
        --output-file     : Write the series to this file instead of the console.
        --excluded-states : Comma-separated states never fetched (default: Removed).
      Example:
        python run.py --stats --project MyProject --closed-states "Done,Closed" --work-item-kinds "Product Backlog Item,Bug" --start-date 2024-01-01

  --states
      Shows state transitions for one issue.
      Required arguments:
        --work-item-id : Issue number.
      Example:
        python run.py --states --project MyProject --work-item-id 1234

Common arguments:
  --organization          : Azure DevOps organization name.
  --personal-access-token : Azure DevOps personal access token.
  --server-url            : Collection URL of an Azure DevOps Server (on-premises) instance.
  --project               : Project to read work items from.
  --config                : JSON configuration file.
  --date-format           : strftime format for report dates (default: %m/%d/%Y).
  --timezone              : Timezone whose calendar days are counted (default: UTC).

Environment Variables:
  AZURE_DEVOPS_ORG        : Default Azure DevOps organization name.
  AZURE_DEVOPS_PAT        : Default Azure DevOps personal access token.
  AZURE_DEVOPS_PROJECT    : Default project.
  AZURE_DEVOPS_SERVER_URL : Default on-premises collection URL.
  AZURE_DEVOPS_TIMEOUT    : Seconds to wait for each request (default: 60).
  ISSUE_COUNTER_LOG_LEVEL : Logging level (default: WARNING).

Use --help for a detailed usage guide.
"""
    print(explanation)


def parse_start_date(value):
    """argparse type for YYYY-MM-DD dates."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date '{value}', expected YYYY-MM-DD")


def build_parser():
    parser = argparse.ArgumentParser(description="Azure DevOps Issue Counter")
    parser.add_argument("--organization", help="Azure DevOps organization name (optional, fallback to AZURE_DEVOPS_ORG environment variable)")
    parser.add_argument("--personal-access-token", help="Azure DevOps personal access token (optional, fallback to AZURE_DEVOPS_PAT environment variable)")
    parser.add_argument("--server-url", help="Collection URL for Azure DevOps Server (optional, fallback to AZURE_DEVOPS_SERVER_URL environment variable)")
    parser.add_argument("--project", help="Project name (optional, fallback to AZURE_DEVOPS_PROJECT environment variable)")
    parser.add_argument("--config", help="Path to JSON configuration file")
    parser.add_argument("--explain", action="store_true", help="Explain all commands and arguments")

    # Statistics
    parser.add_argument("--stats", action="store_true", help="Produce stats on what issues were opened or closed")
    parser.add_argument("--closed-states", help="Comma-separated list of resolved states for issues")
    parser.add_argument("--work-item-kinds", help="Comma-separated list of work item types to count")
    parser.add_argument("--excluded-states", help="Comma-separated list of states to leave out (default: Removed)")
    parser.add_argument("--start-date", type=parse_start_date, help="Earliest date to process (YYYY-MM-DD format)")
    parser.add_argument("-o", "--output-file", help="Output file to be generated")
    parser.add_argument("--date-format", help="strftime format for report dates")
    parser.add_argument("--timezone", help="Timezone used to assign changes to calendar days")

    # State transitions
    parser.add_argument("--states", action="store_true", help="Show state transitions for one issue")
    parser.add_argument("-i", "--work-item-id", type=int, help="Issue number")
    return parser


REQUIRED_ARGUMENTS = {
    "stats": [
        ("start_date", "--start-date", "produce statistics"),
        ("closed_states", "--closed-states", "produce statistics"),
        ("work_item_kinds", "--work-item-kinds", "produce statistics"),
    ],
    "states": [
        ("work_item_id", "--work-item-id", "show state transitions"),
    ],
}


def check_required_arguments(args):
    """Print an error for the first missing argument of the chosen command. Returns False if one is missing."""
    for operation_name, required in REQUIRED_ARGUMENTS.items():
        if not getattr(args, operation_name, False):
            continue
        for attribute, flag, purpose in required:
            if getattr(args, attribute, None) in (None, ""):
                print(f"Error: {flag} is required to {purpose}.")
                return False
    return True


def handle_statistics(args, commands, config_loader):
    commands.generate_statistics(args.start_date, config_loader.get_output_file())
    return 0


def handle_state_transitions(args, commands):
    commands.display_state_transitions(args.work_item_id)
    return 0


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, Config.LOG_LEVEL.upper(), logging.WARNING),
                        format="%(levelname)s %(name)s: %(message)s")

    # Handle explain command
    if args.explain:
        explain_commands()
        return 0

    if not (args.stats or args.states):
        print("Error: No valid operation provided or required arguments missing.")
        parser.print_help()
        return 1

    if not check_required_arguments(args):
        return 1

    config_loader = ConfigLoader(args.config)
    config_loader.update_config_from_cli_args(args)

    settings = ConnectionSettings.from_config(
        organization=args.organization,
        personal_access_token=args.personal_access_token,
        project=args.project,
        server_url=args.server_url
    )

    try:
        if args.stats:
            config_loader.validate_for_stats()
        config_loader.validate_timezone()
        source = AzureDevOpsWorkItemSource(settings)
        if not source.connect():
            print(f"Error: Could not open project '{settings.project}'.")
            return 1

        commands = IssueCounterCommands(source, config_loader)

        # Dispatch table for operations
        operations = {
            "stats": lambda: handle_statistics(args, commands, config_loader),
            "states": lambda: handle_state_transitions(args, commands),
        }

        for operation_name, operation_func in operations.items():
            if getattr(args, operation_name, False):
                return operation_func()
    except ValueError as err:
        print(f"Error: {err}")
        return 1
    except WorkItemFetchError as err:
        print(f"Error: {err}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
