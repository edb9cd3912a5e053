"""JSON exporter for conversion metadata."""
import json
from pathlib import Path
from datetime import datetime
from typing import Any, Dict

from oasdoc.introspection.usage_analyzer import sorted_usage


class JsonExporter:
    """Export conversion metadata (counts, warnings, shared schemas, debug info) to JSON."""

    def build(self, result: Any, source: str = "") -> Dict[str, Any]:
        """Build the metadata document for a ConvertResult."""
        return {
            "metadata": {
                "created_at": datetime.now().isoformat(),
                "source": source,
                "endpoint_count": result.endpoint_count,
                "tag_count": result.tag_count,
                "markdown_length": len(result.markdown),
            },
            "warnings": list(result.warnings),
            "shared_schemas": [usage.to_dict() for _name, usage in sorted_usage(result.shared_schemas)],
            "debug": result.debug.to_dict() if result.debug is not None else None,
        }

    def export(self, output_file: Path, result: Any, source: str = "") -> None:
        """Export to JSON file."""
        output_file = Path(output_file)
        output_file.parent.mkdir(parents=True, exist_ok=True)

        data = self.build(result, source)

        with open(output_file, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, default=str)
