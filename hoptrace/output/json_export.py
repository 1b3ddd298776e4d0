"""
JSON export for hoptrace
"""

import json
from pathlib import Path
from typing import Iterable, Optional, TextIO

from ..models import HopRow


class JsonExporter:
    """
    Export trace rows to JSON.

    The document shape is fixed so other tools can consume it:

        {"data": [{"ttl": 1, "responses_per_ip": {"192.0.2.1": ["1.2ms"]}}]}

    Probes without an answer sit under the "None" key as "*".
    """

    def __init__(self, indent: Optional[int] = None):
        self.indent = indent

    def build(self, rows: Iterable[HopRow]) -> dict:
        """
        Collect rows into the JSON document.

        Pulling from a ResultSequence re-raises its TraceError, so a failed
        trace produces no document.
        """
        return {"data": [row.to_dict() for row in rows]}

    def export(self, rows: Iterable[HopRow], output_path: Optional[Path] = None,
               stream: Optional[TextIO] = None) -> dict:
        """
        Export rows to a file or a stream.

        Args:
            rows: Rows, usually a ResultSequence
            output_path: Optional file path to write
            stream: Optional text stream to write when no path is given

        Returns:
            JSON-serializable dict
        """
        data = self.build(rows)
        content = json.dumps(data, indent=self.indent, ensure_ascii=False)

        if output_path:
            self._write_file(content, output_path)
        elif stream is not None:
            stream.write(content + "\n")

        return data

    def _write_file(self, content: str, path: Path):
        """Write JSON to file"""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content + "\n", encoding='utf-8')
