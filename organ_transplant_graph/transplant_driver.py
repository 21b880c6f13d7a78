"""
Transplant Driver - Console menu for the Transplant Compatibility Graph

Lists, adds, removes and sorts donors and recipients. On start-up the graph
is restored from the snapshot file when one exists, otherwise built from the
donor/recipient text files; quitting writes the snapshot back.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from organ_transplant_graph.config.settings import TransplantSettings, load_settings
from organ_transplant_graph.core.error_handling import (
    TransplantGraphError,
    CapacityExceededError,
    DataIngestionError,
    SnapshotError,
    describe_error
)
from organ_transplant_graph.graph.graph_builder import TransplantGraphBuilder
from organ_transplant_graph.graph.graph_queries import GraphQueryEngine, SortKey
from organ_transplant_graph.graph.transplant_graph import TransplantGraph
from organ_transplant_graph.models.patient import Patient, Role

logger = logging.getLogger(__name__)

MAIN_MENU = """
Menu:
    (LR) - List all recipients
    (LO) - List all donors
    (AO) - Add new donor
    (AR) - Add new recipient
    (RO) - Remove donor
    (RR) - Remove recipient
    (SR) - Sort recipients
    (SO) - Sort donors
    (Q) - Quit
"""


def load_graph(settings: TransplantSettings, out: Optional[TextIO] = None) -> TransplantGraph:
    """
    Restore the snapshot if possible, else build from the text files,
    else start with an empty graph
    """
    out = out or sys.stdout
    snapshot = Path(settings.snapshot_file)
    if snapshot.exists():
        try:
            graph = TransplantGraph.load(snapshot)
            print(f"Loading data from {snapshot}...", file=out)
            return graph
        except SnapshotError as e:
            logger.warning(f"Ignoring unreadable snapshot: {describe_error(e)}")
            print(f"{snapshot} could not be read. Creating new TransplantGraph object...", file=out)
    else:
        print(f"{snapshot} not found. Creating new TransplantGraph object...", file=out)

    builder = TransplantGraphBuilder(settings)
    try:
        print(f"Loading data from '{settings.donor_file}'...", file=out)
        print(f"Loading data from '{settings.recipient_file}'...", file=out)
        return builder.build_from_files()
    except (DataIngestionError, CapacityExceededError) as e:
        print(f"Error loading files: {e}", file=out)
        return TransplantGraph(max_patients=settings.max_patients)


class TransplantDriver:
    """
    Menu-driven interface over a TransplantGraph

    Reads one answer per line from `stdin`; end of input behaves like Q.
    """

    def __init__(
        self,
        graph: TransplantGraph,
        settings: TransplantSettings,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None
    ):
        self.graph = graph
        self.settings = settings
        self.queries = GraphQueryEngine(graph)
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout

    def _say(self, text: str = "") -> None:
        print(text, file=self.stdout)

    def _ask(self, prompt: str) -> Optional[str]:
        self.stdout.write(prompt)
        self.stdout.flush()
        line = self.stdin.readline()
        if line == "":
            return None
        return line.rstrip("\n").strip()

    # ==================== Main Loop ====================

    def run(self) -> None:
        handlers = {
            'LR': lambda: self._say(self.queries.format_recipients()),
            'LO': lambda: self._say(self.queries.format_donors()),
            'AO': lambda: self.add_patient(Role.DONOR),
            'AR': lambda: self.add_patient(Role.RECIPIENT),
            'RO': lambda: self.remove_patient(Role.DONOR),
            'RR': lambda: self.remove_patient(Role.RECIPIENT),
            'SR': lambda: self.sort_submenu(Role.RECIPIENT),
            'SO': lambda: self.sort_submenu(Role.DONOR),
        }

        while True:
            self._say(MAIN_MENU)
            option = self._ask("Please select an option: ")
            self._say()
            if option is None or option.upper() == 'Q':
                self.save()
                break
            handler = handlers.get(option.upper())
            if handler is None:
                self._say("Invalid option.")
                continue
            try:
                handler()
            except TransplantGraphError as e:
                logger.error(f"Menu option {option.upper()} failed: {describe_error(e)}")
                self._say(f"Error: {e}")

        self._say("Program terminating normally...")

    def save(self) -> None:
        try:
            self.graph.save(self.settings.snapshot_file)
            self._say(f"Writing data to {self.settings.snapshot_file}...")
        except SnapshotError as e:
            self._say(f"Error saving data: {e}")

    # ==================== Menu Actions ====================

    def add_patient(self, role: Role) -> Optional[Patient]:
        label = "donor" if role is Role.DONOR else "recipient"
        if role is Role.DONOR:
            name = self._ask("Please enter the organ donor name: ")
            if name is None:
                return None
            blood_prompt = f"Please enter the blood type of {name}: "
            age_prompt = f"Please enter the age of {name}: "
            organ_prompt = f"Please enter the organs {name} is donating: "
        else:
            name = self._ask("Please enter new recipient's name: ")
            if name is None:
                return None
            blood_prompt = "Please enter the recipient's blood type: "
            age_prompt = "Please enter the recipient's age: "
            organ_prompt = "Please enter the organ needed: "

        blood_type = self._ask(blood_prompt) or ""
        raw_age = self._ask(age_prompt) or ""
        try:
            age = int(raw_age)
        except ValueError:
            self._say(f"Invalid age. {label.capitalize()} not added.")
            return None
        organ = self._ask(organ_prompt) or ""

        patient = Patient(0, name, age, organ, blood_type, role)
        try:
            if role is Role.DONOR:
                self.graph.add_donor(patient)
                self._say(f"The organ donor, {name}, has been added to the donor list with ID {patient.id}.")
            else:
                self.graph.add_recipient(patient)
                self._say(
                    f"The organ recipient, {name}, has been added to the recipient list with ID {patient.id}."
                )
        except CapacityExceededError as e:
            self._say(f"{e} {label.capitalize()} not added.")
            return None
        return patient

    def remove_patient(self, role: Role) -> Optional[Patient]:
        if role is Role.DONOR:
            name = self._ask("Please enter the name of the organ donor to remove: ")
        else:
            name = self._ask("Please enter the name of the recipient to remove: ")
        if name is None:
            return None

        if role is Role.DONOR:
            removed = self.graph.remove_donor(name)
            if removed is not None:
                self._say(f"{removed.name} was removed from the organ donor list.")
            else:
                self._say(f"Failed to remove donor: No such patient named {name} in list of donors.")
        else:
            removed = self.graph.remove_recipient(name)
            if removed is not None:
                self._say(f"{removed.name} was removed from the organ transplant waitlist.")
            else:
                self._say(f"Failed to remove recipient: No such patient named {name} in list of recipients.")
        return removed

    def sort_submenu(self, role: Role) -> None:
        is_recipient = role is Role.RECIPIENT
        while True:
            self._say("   (I) Sort by ID")
            self._say(f"   (N) Sort by Number of {'Donors' if is_recipient else 'Recipients'}")
            self._say("   (B) Sort by Blood Type")
            self._say(f"   (O) Sort by Organ {'Needed' if is_recipient else 'Donated'}")
            self._say("   (Q) Back to Main Menu")
            option = self._ask("\nPlease select an option: ")
            self._say()
            if option is None or option.upper() == 'Q':
                self._say("Returning to main menu.")
                return
            try:
                key = SortKey(option.upper())
            except ValueError:
                self._say("Invalid option.")
                continue

            if is_recipient:
                ordered = self.queries.sorted_recipients(key)
                self._say(self.queries.format_recipients(ordered))
            else:
                ordered = self.queries.sorted_donors(key)
                self._say(self.queries.format_donors(ordered))
            self._say()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Organ transplant compatibility graph')
    parser.add_argument('--donors', help='Donor text file')
    parser.add_argument('--recipients', help='Recipient text file')
    parser.add_argument('--snapshot', help='Snapshot file read on start and written on quit')
    parser.add_argument('--max-patients', type=int, help='Capacity of each patient list')
    parser.add_argument('--log-level', help='Logging level')
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    settings = load_settings().with_overrides(
        donor_file=args.donors,
        recipient_file=args.recipients,
        snapshot_file=args.snapshot,
        max_patients=args.max_patients,
        log_level=args.log_level
    )

    # Configure logging
    logging.basicConfig(level=settings.log_level, format=settings.log_format)

    graph = load_graph(settings)
    TransplantDriver(graph, settings).run()
    return 0


if __name__ == '__main__':
    sys.exit(main())
