"""Command-line front end for the patient records database."""

import argparse
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, TextColumn
from rich.table import Table

from .api import RecordsAPI
from .app import RecordsApp
from .backup import ImportProgress
from .config import Settings, load_settings
from .database import RecordStore
from .exceptions import PatientRecordsError
from .migrations import create_runner
from .schemas import PATIENT_STATUS_LABELS, PatientStatus, label_for

console = Console()
logger = logging.getLogger(__name__)


def configure_logging(level: int = logging.INFO) -> None:
    """Send log records through rich."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def print_result(result: dict, success_message: str) -> int:
    if result["success"]:
        console.print(f"[bold green]{success_message}[/bold green]")
        return 0
    console.print(f"[bold red]Error:[/bold red] {result['error']}")
    return 1


# Commands

def cmd_migrate(settings: Settings, args) -> int:
    with RecordsApp(settings):
        console.print("[bold green]Database is up to date.[/bold green]")
    return 0


def cmd_status(settings: Settings, args) -> int:
    store = RecordStore.open(settings.db_path)
    try:
        runner = create_runner(store, settings)
        executed = runner.executed()
        pending = runner.pending()
    finally:
        store.close()

    table = Table(title="Migrations")
    table.add_column("Migration")
    table.add_column("Status")
    for name in executed:
        table.add_row(name, "[green]applied[/green]")
    for migration in pending:
        table.add_row(migration.name, "[yellow]pending[/yellow]")
    console.print(table)
    return 0


def cmd_rollback(settings: Settings, args) -> int:
    store = RecordStore.open(settings.db_path)
    try:
        reverted = create_runner(store, settings).down()
    finally:
        store.close()

    if reverted:
        console.print(f"[bold green]Reverted {reverted}[/bold green]")
    else:
        console.print("[yellow]No migrations to revert.[/yellow]")
    return 0


def cmd_export(settings: Settings, args) -> int:
    with RecordsApp(settings) as app:
        result = RecordsAPI(app).invoke("backup:export", args.path)
    return print_result(result, f"Exported database to {args.path}")


def cmd_import(settings: Settings, args) -> int:
    with RecordsApp(settings) as app:
        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.percentage:>3.0f}%"),
            console=console,
        ) as progress:
            task = progress.add_task("Starting import...", total=100)

            def on_progress(event: ImportProgress) -> None:
                progress.update(task, completed=event.current, description=event.message)

            result = RecordsAPI(app).invoke("backup:import", args.path, on_progress)

    if result["success"]:
        stats = result["data"]
        console.print(
            f"Imported {stats['patients']} patient(s), {stats['notes']} note(s), "
            f"{stats['emergencyContacts']} emergency contact(s), {stats['legalTutors']} legal tutor(s)."
        )
    return print_result(result, "Import complete!")


def cmd_list(settings: Settings, args) -> int:
    with RecordsApp(settings) as app:
        result = RecordsAPI(app).invoke("patient:search", args.search or "", args.status)

    if not result["success"]:
        return print_result(result, "")

    table = Table(title="Patients")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("Email")
    table.add_column("Phone")
    table.add_column("Status")
    table.add_column("First appointment")
    for patient in result["data"]:
        table.add_row(
            str(patient["id"]),
            patient["name"],
            patient["email"],
            patient["phoneNumber"],
            label_for(patient["status"], PATIENT_STATUS_LABELS),
            patient["firstAppointmentDate"] or "-",
        )
    console.print(table)
    return 0


def cmd_stats(settings: Settings, args) -> int:
    with RecordsApp(settings) as app:
        api = RecordsAPI(app)
        patients = api.invoke("patient:statistics")
        notes = api.invoke("note:statistics")

    if not patients["success"]:
        return print_result(patients, "")
    if not notes["success"]:
        return print_result(notes, "")

    console.print(f"[bold]Patients:[/bold] {patients['data']['total']}")
    console.print(f"[bold]Without first appointment:[/bold] {patients['data']['withoutFirstAppointment']}")
    console.print(f"[bold]Average age:[/bold] {patients['data']['averageAge']}")
    console.print(f"[bold]Notes:[/bold] {notes['data']['totalNotes']}")
    console.print(f"[bold]Notes per patient:[/bold] {notes['data']['averageNotesPerPatient']}")
    return 0


COMMANDS = {
    "migrate": cmd_migrate,
    "status": cmd_status,
    "rollback": cmd_rollback,
    "export": cmd_export,
    "import": cmd_import,
    "list": cmd_list,
    "stats": cmd_stats,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="patient-records", description="Manage the patient records database.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("migrate", help="Apply pending migrations")
    subparsers.add_parser("status", help="Show applied and pending migrations")
    subparsers.add_parser("rollback", help="Revert the most recent migration")

    export_parser = subparsers.add_parser("export", help="Export all records to a .json.gz archive")
    export_parser.add_argument("path")

    import_parser = subparsers.add_parser("import", help="Import records from a .json.gz archive")
    import_parser.add_argument("path")

    list_parser = subparsers.add_parser("list", help="List patients")
    list_parser.add_argument("--search", help="Match name, email or phone")
    list_parser.add_argument("--status", choices=[s.value for s in PatientStatus])

    subparsers.add_parser("stats", help="Show patient and note statistics")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for the patient-records command."""
    args = build_parser().parse_args(argv)
    settings = load_settings()
    configure_logging(settings.effective_log_level)

    try:
        return COMMANDS[args.command](settings, args)
    except PatientRecordsError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
