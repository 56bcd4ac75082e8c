"""
File utilities for data handling and I/O operations.
"""

import os
import pandas as pd
from typing import List


def save_to_csv(dataframe: pd.DataFrame, filepath: str) -> str:
    """
    Save DataFrame to CSV file.

    Args:
        dataframe: DataFrame to save
        filepath: Destination file; parent directories are created

    Returns:
        Path to saved file
    """
    if dataframe is None:
        raise ValueError("Cannot save None DataFrame")

    directory = os.path.dirname(str(filepath))
    if directory:
        os.makedirs(directory, exist_ok=True)

    dataframe.to_csv(filepath, index=False)
    return str(filepath)


def ensure_directory(directory: str) -> str:
    """
    Ensure directory exists, create if it doesn't.

    Args:
        directory: Directory path

    Returns:
        Directory path
    """
    os.makedirs(directory, exist_ok=True)
    return directory


def remove_stale_outputs(paths: List[str]) -> List[str]:
    """
    Delete outputs left over from a previous run.

    Args:
        paths: Files that the current run is about to produce

    Returns:
        Paths that were removed
    """
    removed = []
    for path in paths:
        if os.path.exists(path):
            os.remove(path)
            removed.append(str(path))
    return removed


def existing_files(paths: List[str]) -> List[str]:
    """Return the subset of paths that exist on disk."""
    return [str(p) for p in paths if os.path.exists(p)]

