#!/usr/bin/env python3
"""Simple CSV Report Generator."""

import csv
from pathlib import Path
from typing import Any, Dict, List, Optional

from ec2_console.core.constants import DEFAULT_REPORT_DIR, DEFAULT_REPORT_EXTENSION
from ec2_console.utils.logger import setup_logger

INSTANCE_REPORT_FIELDS = [
    "id",
    "name",
    "type",
    "state",
    "availability_zone",
    "launch_time",
    "meta",
    "can_start",
    "can_stop",
    "can_reboot",
]


class CSVReportGenerator:
    """Simple CSV report generator."""

    def __init__(self, output_dir: str = DEFAULT_REPORT_DIR):
        """Initialize the CSV report generator."""
        self.output_dir = output_dir
        self.logger = setup_logger(__name__, "report_generator.log")

    def generate_report(
        self,
        data: List[Dict[str, Any]],
        filename: str,
        fieldnames: Optional[List[str]] = None,
    ) -> Optional[Path]:
        """Write rows to CSV; returns the written path, or None when nothing was written."""
        if not data:
            self.logger.warning("No data provided for report generation")
            return None

        if not filename.endswith(DEFAULT_REPORT_EXTENSION):
            filename = f"{filename}{DEFAULT_REPORT_EXTENSION}"

        output_path = Path(filename)
        if not output_path.is_absolute() and output_path.parent == Path("."):
            output_path = Path(self.output_dir) / output_path

        # Get fieldnames - use provided order or auto-detect
        if fieldnames is None:
            fieldnames_set = set()
            for item in data:
                fieldnames_set.update(item.keys())
            fieldnames = sorted(fieldnames_set)

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, "w", newline="", encoding="utf-8") as csvfile:
                writer = csv.DictWriter(csvfile, fieldnames=fieldnames, extrasaction="ignore")
                writer.writeheader()
                writer.writerows(data)
        except OSError as e:
            self.logger.error(f"Error generating CSV report: {e}")
            return None

        self.logger.info(f"CSV report generated: {output_path} ({len(data)} records)")
        return output_path
