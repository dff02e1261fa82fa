"""CSV export of agent trajectories."""

import csv
from pathlib import Path
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..model.state import SimulationState

FIELDNAMES = ['step', 'agent_id', 'x', 'y', 'angle', 'deposited']


class CSVWriter:
    """
    Exports per-step agent state to CSV incrementally.

    Output format:
        step,agent_id,x,y,angle,deposited
        1,0,12.3456,40.0021,0.785398,1
        ...
    """

    def __init__(self, output_path: Path):
        self.output_path = Path(output_path)
        self.file: Optional[object] = None
        self.writer: Optional[csv.DictWriter] = None
        self._is_open = False

    def open(self) -> None:
        """Create the file and write the header."""
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self.file = open(self.output_path, 'w', newline='')
        self.writer = csv.DictWriter(self.file, fieldnames=FIELDNAMES)
        self.writer.writeheader()
        self._is_open = True

    def append(self, state: "SimulationState") -> None:
        if not self._is_open:
            self.open()
        self.writer.writerows(state.to_csv_rows())
        self.file.flush()

    def close(self) -> None:
        if self.file:
            self.file.close()
            self.file = None
            self.writer = None
            self._is_open = False
