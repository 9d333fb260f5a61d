"""
CLI tool for the new business tracker.
Usage: python -m cli.tracker <list|export|import> [options]
"""

import sys
import json
import argparse
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from new_business.errors import TrackerError
from new_business.tracker.listing import ALL, PolicySummary
from new_business.tracker.models import PolicyQuery, PolicyStatus, PolicyType
from new_business.tracker.service import PolicyService


# ANSI color codes for terminal output
class Colors:
    HEADER = '\033[95m'
    BLUE = '\033[94m'
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'


STATUS_COLORS = {
    PolicyStatus.PENDING_REQUIREMENTS: Colors.YELLOW,
    PolicyStatus.IN_REVIEW: Colors.BLUE,
    PolicyStatus.COMPLETE: Colors.GREEN,
    PolicyStatus.ARCHIVED: Colors.CYAN,
}


def print_header(text: str):
    """Print a header with formatting."""
    print(f"\n{Colors.BOLD}{Colors.BLUE}{text}{Colors.ENDC}")


def print_error(text: str):
    print(f"{Colors.RED}Error: {text}{Colors.ENDC}")


def print_summary(summary: PolicySummary):
    """Print one policy card."""
    policy = summary.policy
    color = STATUS_COLORS.get(policy.status, Colors.ENDC)
    badge = f" {Colors.RED}{Colors.BOLD}URGENT{Colors.ENDC}" if summary.is_urgent else ""

    print(f"\n{Colors.BOLD}{policy.client_name}{Colors.ENDC}{badge}")
    print(f"  {policy.carrier.value} {policy.policy_type.value}  #{policy.policy_number or '-'}")
    print(f"  Status: {color}{policy.status.value}{Colors.ENDC}")
    print(f"  Effective: {policy.effective_date} ({summary.effective_proximity.label})")

    if summary.follow_up_proximity:
        print(f"  Follow-up: {Colors.YELLOW}{summary.follow_up_proximity.label}{Colors.ENDC}")

    print(f"  Progress: {summary.progress_percent:.0f}% ({len(policy.requirements)} requirements)")
    for requirement in summary.outstanding_requirements:
        print(f"    - {requirement.name} [{requirement.status.value}]")


def cmd_list(service: PolicyService, args) -> int:
    query = PolicyQuery(
        search_term=args.search,
        type_filter=args.type,
        status_filter=args.status,
        show_archived=args.archived,
    )
    summaries = service.list_summaries(query)

    if args.json:
        print(json.dumps([s.model_dump(mode="json") for s in summaries], indent=2))
        return 0

    print_header("Archived Policies" if args.archived else "Active Policies")
    print("-" * 40)
    if not summaries:
        print("No policies found.")
        return 0

    for summary in summaries:
        print_summary(summary)
    print(f"\n{len(summaries)} policies")
    return 0


def cmd_export(service: PolicyService, args) -> int:
    filename, data = service.export_snapshot()
    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / filename
    path.write_bytes(data)
    print(f"{Colors.CYAN}Backup saved to:{Colors.ENDC} {path}")
    return 0


def cmd_import(service: PolicyService, args) -> int:
    file_path = Path(args.file)
    if not file_path.exists():
        print_error(f"File not found: {args.file}")
        return 1
    if file_path.suffix.lower() != ".json":
        print_error("Invalid file type. Please select a .json backup file.")
        return 1

    data = file_path.read_bytes()
    preview = service.preview_import(data)
    if not preview.is_valid:
        print_error(preview.message)
        return 1

    print(f"The backup contains {Colors.BOLD}{preview.policy_count}{Colors.ENDC} policies.")
    print(f"{Colors.YELLOW}Importing will replace ALL current policies.{Colors.ENDC}")
    if not args.yes:
        answer = input("Continue? [y/N] ").strip().lower()
        if answer not in ("y", "yes"):
            print("Import cancelled.")
            return 1

    policies = service.import_snapshot(data)
    print(f"{Colors.GREEN}Imported {len(policies)} policies.{Colors.ENDC}")
    return 0


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Track new insurance policies through underwriting",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m cli.tracker list
  python -m cli.tracker list --archived --search nationwide
  python -m cli.tracker export --out backups/
  python -m cli.tracker import backups/new_business_tracker_backup_2024-03-01.json --yes
        """
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="Show policies ordered by urgency")
    list_parser.add_argument("--archived", "-a", action="store_true", help="Show archived policies")
    list_parser.add_argument("--search", "-s", default="", help="Client name, policy number or carrier")
    list_parser.add_argument(
        "--type", "-t",
        default=ALL,
        choices=[ALL] + [t.value for t in PolicyType],
        help="Policy type filter"
    )
    list_parser.add_argument(
        "--status",
        default=ALL,
        choices=[ALL] + [s.value for s in PolicyStatus],
        help="Policy status filter"
    )
    list_parser.add_argument("--json", "-j", action="store_true", help="Output as JSON only")

    export_parser = subparsers.add_parser("export", help="Write a backup file")
    export_parser.add_argument("--out", "-o", default=".", help="Directory for the backup file")

    import_parser = subparsers.add_parser("import", help="Replace all policies with a backup file")
    import_parser.add_argument("file", help="Path to a .json backup file")
    import_parser.add_argument("--yes", "-y", action="store_true", help="Skip the confirmation prompt")

    args = parser.parse_args()
    commands = {"list": cmd_list, "export": cmd_export, "import": cmd_import}

    try:
        service = PolicyService()
        sys.exit(commands[args.command](service, args))
    except TrackerError as e:
        print_error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
