from __future__ import annotations
import logging, sys
from typing import IO, Optional

FORMAT = "[%(levelname)s] %(name)s | %(message)s"


def setup_logging(level: int = logging.INFO, stream: Optional[IO[str]] = None) -> None:
    """
    Logs sur stderr par défaut (stdout = affichage rich de la CLI).
    Rappelable : les handlers précédents sont remplacés.
    """
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(FORMAT))
    logging.basicConfig(level=level, handlers=[handler], force=True)
