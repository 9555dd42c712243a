"""Small filesystem helpers used while preparing a chroot."""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path


def copy_file(source: str | Path, destination: str | Path, mode: int) -> None:
    """Copy *source* to *destination* and set its permission bits to *mode*.

    The data is written to a temporary file next to *destination* which is
    then renamed into place, so a reader never sees a partial copy.
    """
    destination = Path(destination)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{destination.name}.", dir=destination.parent)
    try:
        with os.fdopen(fd, "wb") as out, open(source, "rb") as src:
            shutil.copyfileobj(src, out)
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, destination)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
