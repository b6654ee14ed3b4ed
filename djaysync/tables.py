"""
Loading djay metadata tables

djay keeps its analysis in two databases: cached automatic results keyed by
slug or persistent id, and the preset library holding user corrections under
"Song Entries". Both are read here from JSON exports.
"""

import os
import json
import logging
from typing import Optional, Tuple

from .core.exceptions import TableError
from .core.resolver import (
    MetadataTable, AUTO_TEMPO_FIELD, AUTO_KEY_FIELD, MANUAL_TEMPO_FIELD, MANUAL_KEY_FIELD,
)


MANUAL_ENTRIES_KEY = 'Song Entries'

logger = logging.getLogger(__name__)


def load_table(path: str, tempo_field: str = AUTO_TEMPO_FIELD, key_field: str = AUTO_KEY_FIELD,
               entries_key: Optional[str] = None, name: str = 'table') -> MetadataTable:
    """
    Load a metadata table from a JSON file

    Args:
        path: JSON file holding an object of key -> record
        tempo_field: Record field holding the tempo
        key_field: Record field holding the key index
        entries_key: Read records from this sub-object when the root has it
        name: Table name used in logs

    Raises:
        TableError: If the file is missing, unreadable or not an object
    """
    if not os.path.isfile(path):
        raise TableError("Metadata table not found", path=path)

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise TableError("Could not read metadata table", details=str(e), path=path)

    # Exports of the entries alone are accepted too
    if entries_key is not None and isinstance(data, dict) and entries_key in data:
        data = data[entries_key]

    if not isinstance(data, dict):
        raise TableError("Metadata table must be a JSON object",
                         details=f"got {type(data).__name__}", path=path)

    table = MetadataTable(data, tempo_field, key_field, name=name)
    logger.info(f"Loaded {name} table: {len(table)} entries from {path}")
    return table


def load_tables(auto_path: str, manual_path: Optional[str] = None) -> Tuple[MetadataTable, MetadataTable]:
    """
    Load the automatic and manual tables with djay's field names

    A missing manual table is not an error: djay only writes it once the
    user has corrected a value.
    """
    auto_table = load_table(auto_path, AUTO_TEMPO_FIELD, AUTO_KEY_FIELD, name='auto')

    if manual_path and os.path.exists(manual_path):
        manual_table = load_table(manual_path, MANUAL_TEMPO_FIELD, MANUAL_KEY_FIELD,
                                  entries_key=MANUAL_ENTRIES_KEY, name='manual')
    else:
        if manual_path:
            logger.warning(f"Manual table not found, using automatic values only: {manual_path}")
        manual_table = MetadataTable.manual()

    return auto_table, manual_table
