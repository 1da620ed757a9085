"""
CSV export of the simulation history.

The file starts with one line describing the parameter set, followed by a column
header naming the recorded channels and one row per history sample, oldest first,
values formatted to two decimal places.
"""

import os
import logging
from datetime import datetime
from typing import Optional

import pandas as pd

from ..exceptions import ExportError
from ..core.history import HISTORY_CHANNELS

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger("Export")

EXPORT_PREFIX = 'ev_simulation_'
TIMESTAMP_FORMAT = '%Y%m%d_%H%M%S'
PARTIAL_SUFFIX = '.part'


def format_parameter_header(parameters) -> str:
    """
    Describe a parameter set on a single line.

    Args:
        parameters: SimulationParameters instance

    Returns:
        Header line without trailing newline
    """
    return (
        f"Simulation Parameters: Voltage={parameters.battery_voltage:.2f} V, "
        f"Capacity={parameters.battery_capacity:.2f} kWh, "
        f"Motor Power={parameters.motor_power:.2f} kW, "
        f"Mass={parameters.vehicle_mass:.2f} kg, "
        f"Drag={parameters.drag_coefficient:.2f}, "
        f"Frontal Area={parameters.frontal_area:.2f} m², "
        f"Air Density={parameters.air_density:.2f} kg/m³, "
        f"Rolling Resistance={parameters.rolling_resistance:.2f}, "
        f"Gear Ratio={parameters.gear_ratio:.2f}, "
        f"Thermal Mass={parameters.thermal_mass:.2f} J/°C"
    )


def history_table(history) -> pd.DataFrame:
    """
    History as an export table: labelled columns, rows indexed from 0.

    Args:
        history: HistoryView (chronological)

    Returns:
        DataFrame with one column per channel
    """
    frame = history.to_frame()
    frame.columns = [channel.label for channel in HISTORY_CHANNELS]
    frame.index.name = 'Index'
    return frame


def export_filename(directory: Optional[str] = None, timestamp: Optional[datetime] = None) -> str:
    """
    Timestamped export path that does not collide with an existing file.

    Args:
        directory: Output directory (current directory if None)
        timestamp: Time used in the name (now if None)

    Returns:
        File path
    """
    directory = directory or os.curdir
    stamp = (timestamp or datetime.now()).strftime(TIMESTAMP_FORMAT)

    path = os.path.join(directory, f"{EXPORT_PREFIX}{stamp}.csv")
    suffix = 1
    while os.path.exists(path):
        path = os.path.join(directory, f"{EXPORT_PREFIX}{stamp}_{suffix}.csv")
        suffix += 1
    return path


def write_history_csv(path: str, parameters, history) -> None:
    """
    Write the parameter header and the history table to path.

    The file is written next to its final name and moved into place once
    complete; a failed write leaves nothing behind.
    """
    table = history_table(history)
    partial_path = path + PARTIAL_SUFFIX
    try:
        with open(partial_path, 'w', encoding='utf-8', newline='') as f:
            f.write(format_parameter_header(parameters) + '\n')
            table.to_csv(f, float_format='%.2f', lineterminator='\n')
        os.replace(partial_path, path)
    except OSError:
        if os.path.exists(partial_path):
            os.remove(partial_path)
        raise


def export_history(snapshot, directory: Optional[str] = None,
                   timestamp: Optional[datetime] = None) -> str:
    """
    Export a simulation snapshot to a timestamped CSV file.

    Args:
        snapshot: SimulationSnapshot (its history should be detached)
        directory: Output directory, created if missing
        timestamp: Time used in the file name (now if None)

    Returns:
        Path of the written file

    Raises:
        ExportError: If the file cannot be written
    """
    try:
        if directory:
            os.makedirs(directory, exist_ok=True)
        path = export_filename(directory, timestamp)
        write_history_csv(path, snapshot.parameters, snapshot.history)
    except OSError as e:
        logger.error(f"Error exporting data: {str(e)}")
        raise ExportError(f"Error exporting data: {str(e)}") from e

    logger.info(f"Data exported to {path}")
    return path


def load_history_csv(path: str) -> pd.DataFrame:
    """
    Read an exported file back into a DataFrame (the parameter line is skipped).

    Args:
        path: Path of an exported CSV file

    Returns:
        DataFrame indexed by sample index with one column per channel label
    """
    return pd.read_csv(path, skiprows=1, index_col='Index', encoding='utf-8')
