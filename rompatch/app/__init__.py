"""App-level APIs.

Thin controller functions called by the CLI. They keep the command surface
decoupled from the record codec and patch engine internals.
"""

from .models import BaselineReport, DumpReport, PatchMode, PatchRunReport
from .patch_controller import dump_patch_file, generate_baseline, run_patch

__all__ = [
    "BaselineReport",
    "DumpReport",
    "PatchMode",
    "PatchRunReport",
    "dump_patch_file",
    "generate_baseline",
    "run_patch",
]
