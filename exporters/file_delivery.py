"""Save exported payloads to the local output directory."""

import logging
import os
from pathlib import Path
from typing import Optional, Union


class FileDelivery:
    """Writes a text or binary payload under a target filename."""

    def __init__(self, output_directory: Union[str, Path], logger: Optional[logging.Logger] = None):
        self.output_directory = Path(output_directory)
        self.logger = logger or logging.getLogger('paper_markdown_exporter.exporters.delivery')

    def save(self, payload: Union[str, bytes], filename: str) -> Path:
        """
        Write ``payload`` to ``output_directory/filename``.

        The payload lands in a temporary sibling first and is moved into
        place once fully written, so a failed write never leaves a partial
        document behind. An existing file with the same name is replaced.

        Args:
            payload: Markdown text or archive bytes
            filename: Target filename (no directory components)

        Returns:
            Path of the written file

        Raises:
            OSError: If the directory or file cannot be written
        """
        data = payload.encode('utf-8') if isinstance(payload, str) else payload

        self.output_directory.mkdir(parents=True, exist_ok=True)
        target = self.output_directory / filename
        partial = target.with_name(target.name + '.part')

        try:
            with open(partial, 'wb') as f:
                f.write(data)
            os.replace(partial, target)
        except OSError:
            if partial.exists():
                partial.unlink()
            raise

        self.logger.debug(f"Wrote {len(data)} bytes to {target}")
        return target


__all__ = ['FileDelivery']
