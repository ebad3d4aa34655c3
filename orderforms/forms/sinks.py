"""Where generated documents go. Anything with write(document) -> str works as a sink."""

import logging
import os

log = logging.getLogger("orderforms.sinks")


class DirectorySink:
    """Write each document as <output_dir>/<filename>, replacing any earlier copy."""

    def __init__(self, output_dir: str):
        self.output_dir = output_dir

    def write(self, document) -> str:
        os.makedirs(self.output_dir, exist_ok=True)
        path = os.path.join(self.output_dir, document.filename)
        with open(path, "wb") as f:
            f.write(document.pdf_bytes)
        log.info("Saved %s (%d bytes)", path, len(document.pdf_bytes),
                 extra={"vendor": document.vendor})
        return path


class MemorySink:
    """Collects (filename, bytes) pairs; used by the HTTP layer to build a zip."""

    def __init__(self):
        self.files = []

    def write(self, document) -> str:
        self.files.append((document.filename, document.pdf_bytes))
        return document.filename
