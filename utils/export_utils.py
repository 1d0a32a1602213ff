from __future__ import annotations

import os
from datetime import datetime

from base_classes import ExportFailure, ExportTarget

EXPORT_PREFIX = "bsky_response_"
EXPORT_SUFFIX = ".json"


def export_filename(now: datetime) -> str:
    """Timestamped export name, e.g. ``bsky_response_2024_01_31_23_59_59.json``."""
    return f"{EXPORT_PREFIX}{now.strftime('%Y_%m_%d_%H_%M_%S')}{EXPORT_SUFFIX}"


class FileExporter(ExportTarget):
    """
    Writes exported responses into a single directory.
    Relative directories resolve against the current working directory.
    """

    def __init__(self, export_dir: str = ".") -> None:
        self.export_dir = os.path.abspath(os.path.expanduser(export_dir or "."))

    def write(self, filename: str, text: str) -> str:
        path = os.path.join(self.export_dir, os.path.basename(filename))
        try:
            os.makedirs(self.export_dir, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                f.write(text)
        except OSError as e:
            raise ExportFailure(str(e), debug_info={'path': path})
        return path
